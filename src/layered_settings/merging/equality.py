"""
Structural equality and flat object diffing for JSON values.

Equality follows JSON kinds rather than Python's ``==``:

- ``True`` is never equal to ``1`` (booleans and numbers are different kinds)
- ``NaN`` is never equal to itself
- ``None`` is distinct from ``{}``
- Lists compare as index-keyed objects, so order matters and
  ``[1, 2]`` equals ``{"0": 1, "1": 2}``. This last quirk is kept on purpose
  so results match settings written by other tools.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import layered_settings.merging.types as types


def _kind(value: _typing.Any) -> str:
    """Classify a value by JSON kind."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (_abc.Mapping, list, tuple)):
        return "object"
    return type(value).__name__


def _entries(value: _typing.Any) -> dict[str, _typing.Any]:
    """Key/value view of an object-kind value, keys as strings."""
    if isinstance(value, _abc.Mapping):
        return {str(key): item for key, item in value.items()}
    return {str(index): item for index, item in enumerate(value)}


def deep_equal(a: _typing.Any, b: _typing.Any) -> bool:
    """
    Compare two JSON values structurally.

    Args:
        a: First value.
        b: Second value.

    Returns:
        True if both values have the same kind and the same content.
    """
    kind = _kind(a)
    if kind != _kind(b):
        return False
    if kind == "null":
        return True
    if kind != "object":
        return bool(a == b)
    if a is b:
        return True

    a_entries = _entries(a)
    b_entries = _entries(b)
    if len(a_entries) != len(b_entries):
        return False
    return all(
        key in b_entries and deep_equal(value, b_entries[key])
        for key, value in a_entries.items()
    )


@_dataclasses.dataclass(slots=True)
class ObjectDiff:
    """Flat difference between two settings mappings."""

    added: types.Setting = _dataclasses.field(default_factory=dict)
    changed: types.Setting = _dataclasses.field(default_factory=dict)
    removed: list[str] = _dataclasses.field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.changed or self.removed)


def diff_objects(prev: types.Setting, curr: types.Setting) -> ObjectDiff:
    """
    Diff two settings mappings one level deep.

    Membership is decided by key presence, so a key holding ``None`` counts
    as present. Nested changes surface as one ``changed`` entry holding the
    whole new value.

    Args:
        prev: Earlier snapshot.
        curr: Later snapshot.

    Returns:
        ObjectDiff with added and changed values taken from ``curr`` and
        removed keys listed in ``prev`` order.
    """
    added = {key: value for key, value in curr.items() if key not in prev}
    changed = {
        key: value
        for key, value in curr.items()
        if key in prev and not deep_equal(prev[key], value)
    }
    removed = [key for key in prev if key not in curr]
    return ObjectDiff(added=added, changed=changed, removed=removed)
