"""Data model for layered configuration files and merge provenance.

- LayeredConfig: the parsed shape of one configuration file
- ArraySegmentProvenance: a contiguous run of a merged array owned by one file
- OverrideEntry: a value a key held before being superseded
- KeyProvenance: per-key record of the winner and everything it overrode

Design decision: LayeredConfig uses `extra="allow"` so metadata keys such as
``name`` or ``version`` survive parsing. They take no part in merging.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import pydantic as _pydantic

Setting: _typing.TypeAlias = dict[str, _typing.Any]
"""Flat settings mapping. Values are any JSON value."""


class LayeredConfig(_pydantic.BaseModel):
    """
    One configuration file.

    Attributes:
        root: Stop walking ancestor directories after this file.
        enabled: ``False`` skips this file and its whole extends subtree.
            ``None`` (absent) behaves like ``True``.
        extends: Zero or more ``.json`` paths merged before ``settings``.
        settings: This file's own key/value contributions.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    root: _pydantic.StrictBool | None = None
    enabled: _pydantic.StrictBool | None = None
    extends: str | list[str] | None = None
    settings: dict[str, _typing.Any] | None = None

    def extends_list(self) -> list[str]:
        """Return extends targets as a list, in declaration order."""
        if self.extends is None:
            return []
        if isinstance(self.extends, str):
            return [self.extends]
        return list(self.extends)

    @property
    def is_disabled(self) -> bool:
        """True only when ``enabled`` is explicitly false."""
        return self.enabled is False


@_dataclasses.dataclass(frozen=True, slots=True)
class ArraySegmentProvenance:
    """A contiguous run inside a merged array contributed by one file.

    ``start`` is the merged array's length at the moment this segment was
    appended.
    """

    source_file: str
    start: int
    length: int


@_dataclasses.dataclass(frozen=True, slots=True)
class OverrideEntry:
    """A value a key held before a later file replaced it."""

    file: str
    value: _typing.Any


@_dataclasses.dataclass(slots=True)
class KeyProvenance:
    """
    Provenance for a single settings key.

    Scalar and object keys push the previous winner onto ``overrides`` each
    time a later file contributes. Array keys instead grow
    ``array_segments`` and never touch ``overrides``; their ``winner_value``
    is the full concatenated array.
    """

    winner: str
    winner_value: _typing.Any
    overrides: list[OverrideEntry] = _dataclasses.field(default_factory=list)
    array_segments: list[ArraySegmentProvenance] | None = None

    @property
    def is_conflicted(self) -> bool:
        return bool(self.overrides)

    @property
    def all_files(self) -> list[str]:
        """Winner first, then every overridden file, oldest first."""
        return [self.winner, *(entry.file for entry in self.overrides)]

    def to_dict(self) -> dict[str, _typing.Any]:
        """Plain-dict form for JSON output."""
        result: dict[str, _typing.Any] = {
            "winner": self.winner,
            "winnerValue": self.winner_value,
            "overrides": [
                {"file": entry.file, "value": entry.value} for entry in self.overrides
            ],
        }
        if self.array_segments is not None:
            result["arraySegments"] = [
                {"sourceFile": seg.source_file, "start": seg.start, "length": seg.length}
                for seg in self.array_segments
            ]
        return result


ProvenanceMap: _typing.TypeAlias = dict[str, KeyProvenance]
