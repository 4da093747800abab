"""
Merge core: resolves extends chains into one settings mapping with provenance.

Resolution is depth-first with ancestors first:

1. Resolve the entry point to an absolute path
2. Stop (and report) if that path is already on the active resolution path
3. Parse it as JSON-with-comments (missing file: contribute nothing, silently)
4. Skip it and its whole extends subtree if ``enabled`` is false
5. Resolve every ``extends`` target before merging this file's settings
6. Merge this file's ``settings`` under its normalized absolute path

Faults never abort a merge. Each one is reported through MergerCallbacks and
only the affected subtree is skipped.

Thread safety: NOT safe for concurrent merges on one instance. Use one
ConfigMergerCore per concurrent merge. Getters return copies, so readers of a
finished merge never alias internal state.
"""

from __future__ import annotations

import copy as _copy
import dataclasses as _dataclasses
import inspect as _inspect
import logging as _logging
import typing as _typing

import pydantic as _pydantic

import layered_settings.constants as _constants
import layered_settings.errors as errors
import layered_settings.file_access as file_access
import layered_settings.merging.jsonc as jsonc
import layered_settings.merging.types as types

_logger = _logging.getLogger(__name__)

_T = _typing.TypeVar("_T")


@_dataclasses.dataclass
class MergerCallbacks:
    """
    Optional notifications for non-fatal merge faults.

    A missing handler means the fault is tolerated silently: the merge
    continues and the affected contribution is skipped. Exceptions raised by
    a handler propagate to the caller of the merge.
    """

    on_circular_dependency: _typing.Callable[[str], None] | None = None
    on_parse_error: _typing.Callable[[str, Exception], None] | None = None
    on_extend_not_found: _typing.Callable[[str], None] | None = None
    on_invalid_extend: _typing.Callable[[str], None] | None = None


@_dataclasses.dataclass(frozen=True, slots=True)
class ChainEntry:
    """One entry point of a merge chain."""

    config_path: str
    base_dir: str


class UrlFetcher(_typing.Protocol):
    """Resolves a remote ``extends`` target to settings, or None on failure."""

    async def fetch(self, url: str) -> types.Setting | None: ...


async def maybe_await(value: _T | _typing.Awaitable[_T]) -> _T:
    """Await ``value`` if a reader returned an awaitable."""
    if _inspect.isawaitable(value):
        return await value
    return value


def normalize_path(path: str) -> str:
    """Convert backslashes to forward slashes."""
    return path.replace("\\", "/")


def is_language_key(key: str) -> bool:
    """True for language-scoped keys such as ``[typescript]``."""
    return _constants.LANGUAGE_KEY_PATTERN.match(key) is not None


def _deep_merge_values(base: _typing.Any, override: _typing.Any) -> _typing.Any:
    """
    Merge ``override`` into ``base`` without mutating either.

    Dicts merge key by key, lists concatenate, anything else (including
    None) replaces.
    """
    if isinstance(base, dict) and isinstance(override, dict):
        result = dict(base)
        for key, value in override.items():
            if key in result:
                result[key] = _deep_merge_values(result[key], value)
            else:
                result[key] = _copy.deepcopy(value)
        return result
    if isinstance(base, list) and isinstance(override, list):
        return [*base, *_copy.deepcopy(override)]
    return _copy.deepcopy(override)


class ConfigMergerCore:
    """
    Layered configuration merger with per-key provenance.

    Example:
        >>> reader = file_access.InMemoryFileReader()
        >>> reader.add_json_file("/base.json", {"settings": {"tabSize": 2}})
        >>> reader.add_json_file(
        ...     "/config.json", {"extends": "./base.json", "settings": {"tabSize": 4}}
        ... )
        >>> merger = ConfigMergerCore(reader)
        >>> asyncio.run(merger.merge_from_config("/config.json", "/"))
        >>> merger.get_settings()
        {'tabSize': 4}
        >>> merger.get_conflicted_keys()
        ['tabSize']

    Args:
        file_reader: File access capability.
        callbacks: Fault notifications. Defaults to none (silent).
        url_fetcher: Resolver for ``http(s)://`` extends targets. Without
            one, URL targets are skipped silently.
        deep_merge_objects: Recursively merge plain object values of the
            same key across files. When False, objects are replaced
            wholesale. Language-scoped keys are always shallow-merged.
    """

    def __init__(
        self,
        file_reader: file_access.FileReader,
        callbacks: MergerCallbacks | None = None,
        *,
        url_fetcher: UrlFetcher | None = None,
        deep_merge_objects: bool = True,
    ) -> None:
        self._reader = file_reader
        self._callbacks = callbacks if callbacks is not None else MergerCallbacks()
        self._url_fetcher = url_fetcher
        self._deep_merge_objects = deep_merge_objects

        self._final_settings: types.Setting = {}
        self._provenance: types.ProvenanceMap = {}
        self._resolving: set[str] = set()
        self._extended_files: set[str] = set()
        self._entry_points: set[str] = set()

    @property
    def callbacks(self) -> MergerCallbacks:
        return self._callbacks

    # =========================================================================
    # Public API
    # =========================================================================

    async def merge_from_config_chain(
        self,
        entries: _typing.Iterable[ChainEntry | tuple[str, str]],
    ) -> None:
        """
        Merge several entry points, in order, into one accumulated result.

        Later entries win over earlier ones exactly as if the earlier entries
        were ``extends`` ancestors of the later ones. All previous state is
        cleared first.

        Args:
            entries: ChainEntry objects or ``(config_path, base_dir)`` pairs.
        """
        self.reset()
        chain = [
            entry if isinstance(entry, ChainEntry) else ChainEntry(*entry) for entry in entries
        ]
        self._entry_points = {
            normalize_path(self._absolute(entry.config_path, entry.base_dir)) for entry in chain
        }
        for entry in chain:
            await self._resolve_config(entry.config_path, entry.base_dir)

        _logger.debug(
            "Merge complete: %d keys, %d extended files, %d conflicts",
            len(self._final_settings),
            len(self._extended_files),
            len(self.get_conflicted_keys()),
        )

    async def merge_from_config(self, config_path: str, base_dir: str) -> None:
        """Merge a single entry point. See merge_from_config_chain."""
        await self.merge_from_config_chain([ChainEntry(config_path, base_dir)])

    def reset(self) -> None:
        """Clear settings, provenance, the cycle guard, and extended files."""
        self._final_settings = {}
        self._provenance = {}
        self._resolving = set()
        self._extended_files = set()
        self._entry_points = set()

    def get_settings(self) -> types.Setting:
        return _copy.deepcopy(self._final_settings)

    def get_provenance(self) -> types.ProvenanceMap:
        return {key: _copy.deepcopy(prov) for key, prov in self._provenance.items()}

    def get_owned_keys(self) -> set[str]:
        """Keys present in the merged settings."""
        return set(self._final_settings)

    def get_extended_files(self) -> set[str]:
        """Files reached through ``extends``. Entry points are not included."""
        return set(self._extended_files)

    def get_conflicted_keys(self) -> list[str]:
        """Keys whose value superseded an earlier one. Array keys never appear."""
        return [key for key, prov in self._provenance.items() if prov.overrides]

    # =========================================================================
    # Chain resolution
    # =========================================================================

    def _absolute(self, path: str, base_dir: str) -> str:
        if self._reader.is_absolute(path):
            return path
        return self._reader.resolve_path(base_dir, path)

    async def _resolve_config(self, config_path: str, base_dir: str) -> None:
        absolute_path = self._absolute(config_path, base_dir)

        if absolute_path in self._resolving:
            _logger.warning("Circular dependency detected: %s", absolute_path)
            if self._callbacks.on_circular_dependency:
                self._callbacks.on_circular_dependency(absolute_path)
            return

        self._resolving.add(absolute_path)
        try:
            config = await self._parse_config_file(absolute_path)
            if config is None:
                return

            if config.is_disabled:
                _logger.debug("Skipping disabled config: %s", absolute_path)
                return

            config_dir = self._reader.dirname(absolute_path)
            for extend_path in config.extends_list():
                await self._resolve_extend(extend_path, config_dir)

            if config.settings:
                self._merge_settings(config.settings, normalize_path(absolute_path))
        finally:
            self._resolving.discard(absolute_path)

    async def _resolve_extend(self, extend_path: str, base_dir: str) -> None:
        if not extend_path.endswith(_constants.EXTENDS_SUFFIX):
            message = f"extends must point to a .json file: {extend_path}"
            _logger.warning(message)
            if self._callbacks.on_invalid_extend:
                self._callbacks.on_invalid_extend(message)
            return

        if extend_path.startswith(_constants.URL_PREFIXES):
            await self._resolve_url(extend_path)
            return

        resolved = (
            extend_path
            if self._reader.is_absolute(extend_path)
            else self._reader.resolve_path(base_dir, extend_path)
        )

        if not await maybe_await(self._reader.exists(resolved)):
            _logger.warning("Extended file not found: %s", resolved)
            if self._callbacks.on_extend_not_found:
                self._callbacks.on_extend_not_found(resolved)
            return

        normalized = normalize_path(resolved)
        if normalized not in self._entry_points:
            self._extended_files.add(normalized)
        await self._resolve_config(resolved, self._reader.dirname(resolved))

    async def _resolve_url(self, url: str) -> None:
        if self._url_fetcher is None:
            _logger.debug("No URL fetcher configured, skipping %s", url)
            return

        settings = await self._url_fetcher.fetch(url)
        if settings:
            self._merge_settings(settings, url)

    async def _parse_config_file(self, path: str) -> types.LayeredConfig | None:
        content = await maybe_await(self._reader.read_file(path))
        if not content:
            return None

        try:
            data = jsonc.parse_jsonc(content)
            return types.LayeredConfig.model_validate(data)
        except jsonc.JsoncParseError as e:
            self._report_parse_error(path, e)
        except _pydantic.ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            shape_error = errors.ConfigShapeError(path, problems)
            shape_error.__cause__ = e
            self._report_parse_error(path, shape_error)
        return None

    def _report_parse_error(self, path: str, error: Exception) -> None:
        _logger.warning("Failed to parse %s: %s", path, error)
        if self._callbacks.on_parse_error:
            self._callbacks.on_parse_error(path, error)

    # =========================================================================
    # Settings merge
    # =========================================================================

    def _merge_settings(self, settings: types.Setting, source: str) -> None:
        """Merge one file's settings, in declaration order, under ``source``."""
        _logger.debug("Merging %d keys from %s", len(settings), source)
        for key, value in settings.items():
            if is_language_key(key) and isinstance(value, dict):
                self._merge_language_block(key, value)
            elif isinstance(value, list):
                self._merge_array(key, value, source)
            else:
                self._merge_value(key, value, source)

    def _merge_language_block(self, key: str, value: dict[str, _typing.Any]) -> None:
        # Shallow merge, no provenance for the block or its sub-keys
        existing = self._final_settings.get(key)
        if not isinstance(existing, dict):
            existing = {}
            self._final_settings[key] = existing
        existing.update(_copy.deepcopy(value))

    def _merge_array(self, key: str, value: list[_typing.Any], source: str) -> None:
        existing_value = self._final_settings.get(key)
        prev_length = len(existing_value) if isinstance(existing_value, list) else 0

        merged = [
            *(existing_value if isinstance(existing_value, list) else []),
            *_copy.deepcopy(value),
        ]
        self._final_settings[key] = merged

        segment = types.ArraySegmentProvenance(
            source_file=source,
            start=prev_length,
            length=len(value),
        )

        existing = self._provenance.get(key)
        if existing is None:
            self._provenance[key] = types.KeyProvenance(
                winner=source,
                winner_value=merged,
                array_segments=[segment],
            )
            return

        if existing.array_segments is None:
            existing.array_segments = []
        existing.array_segments.append(segment)
        existing.winner = source
        existing.winner_value = merged

    def _merge_value(self, key: str, value: _typing.Any, source: str) -> None:
        current = self._final_settings.get(key)
        if self._deep_merge_objects and isinstance(current, dict) and isinstance(value, dict):
            effective = _deep_merge_values(current, value)
        else:
            effective = _copy.deepcopy(value)
        self._final_settings[key] = effective

        # winner_value is the effective value, never the incoming fragment
        existing = self._provenance.get(key)
        if existing is None:
            self._provenance[key] = types.KeyProvenance(
                winner=source, winner_value=_copy.deepcopy(effective)
            )
        else:
            existing.overrides.append(
                types.OverrideEntry(file=existing.winner, value=existing.winner_value)
            )
            existing.winner = source
            existing.winner_value = _copy.deepcopy(effective)
