"""
Config chain discovery.

Walks from a starting directory toward the filesystem root looking for
``<dir>/.vscode/layered-settings/config.json`` at each level. A file
declaring ``"root": true`` ends the walk. The result is ordered outermost
first, ready for ConfigMergerCore.merge_from_config_chain, so files closer
to the starting directory win.
"""

from __future__ import annotations

import logging as _logging

import layered_settings.constants as _constants
import layered_settings.file_access as file_access
import layered_settings.merging.jsonc as jsonc
import layered_settings.merging.merger as merger

_logger = _logging.getLogger(__name__)


async def _declares_root(reader: file_access.FileReader, path: str) -> bool:
    # Unreadable or malformed files never stop the walk; the merge reports them
    content = await merger.maybe_await(reader.read_file(path))
    if not content:
        return False
    try:
        document = jsonc.parse_jsonc(content)
    except jsonc.JsoncParseError:
        return False
    return isinstance(document, dict) and document.get("root") is True


async def find_config_chain(
    start_dir: str,
    file_reader: file_access.FileReader | None = None,
    *,
    config_dir: str = _constants.DEFAULT_CONFIG_DIR,
    config_filename: str = _constants.DEFAULT_CONFIG_FILENAME,
) -> list[merger.ChainEntry]:
    """
    Collect config files from ``start_dir`` and its ancestors.

    Args:
        start_dir: Directory to start from. Relative paths are resolved
            against the current directory by LocalFileReader.
        file_reader: File access. Defaults to LocalFileReader.
        config_dir: Directory, relative to each level, holding the file.
        config_filename: Config file name inside ``config_dir``.

    Returns:
        ChainEntry list, outermost ancestor first. Empty if nothing found.
    """
    reader = file_reader if file_reader is not None else file_access.LocalFileReader()

    current = start_dir if reader.is_absolute(start_dir) else reader.resolve_path(".", start_dir)
    found: list[merger.ChainEntry] = []

    while True:
        candidate = reader.resolve_path(reader.resolve_path(current, config_dir), config_filename)
        if await merger.maybe_await(reader.exists(candidate)):
            _logger.debug("Found config %s", candidate)
            found.append(merger.ChainEntry(candidate, reader.dirname(candidate)))
            if await _declares_root(reader, candidate):
                _logger.debug("Stopping at root config %s", candidate)
                break

        parent = reader.dirname(current)
        if parent == current:
            break
        current = parent

    found.reverse()
    return found
