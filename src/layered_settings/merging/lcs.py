"""
Longest-common-subsequence diff for ordered settings arrays.

Used to decide whether an externally edited array warrants a writeback:

- "none": identical, or a pure reorder (same multiset). Never write back.
- "simple": a best-effort list of additions and removals.
- "complex": too large to diff; the caller must not attempt writeback.

Example:
    >>> diff_arrays([1, 2, 3], [1, 3])
    ArrayDiff(kind='simple', added=[], removed=[2], removed_indices=[1])
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import layered_settings.constants as _constants
import layered_settings.merging.equality as equality

ArrayDiffKind: _typing.TypeAlias = _typing.Literal["none", "simple", "complex"]

Equality: _typing.TypeAlias = _typing.Callable[[_typing.Any, _typing.Any], bool]


@_dataclasses.dataclass(slots=True)
class ArrayDiff:
    """Classification and add/remove description of an array change."""

    kind: ArrayDiffKind
    added: list[_typing.Any] = _dataclasses.field(default_factory=list)
    removed: list[_typing.Any] = _dataclasses.field(default_factory=list)
    # Indices into the previous array, ascending
    removed_indices: list[int] = _dataclasses.field(default_factory=list)


def _lcs_table(
    a: _typing.Sequence[_typing.Any],
    b: _typing.Sequence[_typing.Any],
    eq: Equality,
) -> list[list[int]]:
    """Build the (len(a)+1) x (len(b)+1) LCS length table."""
    table = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(1, len(a) + 1):
        row = table[i]
        prev_row = table[i - 1]
        for j in range(1, len(b) + 1):
            if eq(a[i - 1], b[j - 1]):
                row[j] = prev_row[j - 1] + 1
            else:
                row[j] = max(prev_row[j], row[j - 1])
    return table


def _is_multiset_equal(
    a: _typing.Sequence[_typing.Any],
    b: _typing.Sequence[_typing.Any],
    eq: Equality,
) -> bool:
    """True if every element of ``a`` matches a distinct element of ``b``."""
    if len(a) != len(b):
        return False

    used = [False] * len(b)
    for item in a:
        for j, candidate in enumerate(b):
            if not used[j] and eq(item, candidate):
                used[j] = True
                break
        else:
            return False
    return True


def _backtrack(
    prev: _typing.Sequence[_typing.Any],
    curr: _typing.Sequence[_typing.Any],
    table: list[list[int]],
    eq: Equality,
) -> ArrayDiff:
    """Walk the LCS table from the end, collecting additions and removals.

    On a mismatch an addition is recorded whenever moving through ``curr``
    keeps at least as much common length as moving through ``prev``.
    """
    added: list[_typing.Any] = []
    removed: list[_typing.Any] = []
    removed_indices: list[int] = []

    i, j = len(prev), len(curr)
    while i > 0 or j > 0:
        if i > 0 and j > 0 and eq(prev[i - 1], curr[j - 1]):
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            added.append(curr[j - 1])
            j -= 1
        else:
            removed.append(prev[i - 1])
            removed_indices.append(i - 1)
            i -= 1

    added.reverse()
    removed.reverse()
    removed_indices.reverse()
    return ArrayDiff(
        kind="simple",
        added=added,
        removed=removed,
        removed_indices=removed_indices,
    )


def diff_arrays(
    prev: _typing.Sequence[_typing.Any],
    curr: _typing.Sequence[_typing.Any],
) -> ArrayDiff:
    """
    Classify the change from ``prev`` to ``curr``.

    Args:
        prev: The array before the edit.
        curr: The array after the edit.

    Returns:
        ArrayDiff. ``kind="complex"`` means "cannot determine", not
        "no changes".
    """
    eq = equality.deep_equal

    if len(prev) == len(curr) and all(eq(p, c) for p, c in zip(prev, curr)):
        return ArrayDiff(kind="none")

    if len(prev) > _constants.MAX_ARRAY_DIFF_SIZE or len(curr) > _constants.MAX_ARRAY_DIFF_SIZE:
        return ArrayDiff(kind="complex")

    # Reorders never trigger writeback
    if _is_multiset_equal(prev, curr, eq):
        return ArrayDiff(kind="none")

    table = _lcs_table(prev, curr, eq)
    return _backtrack(prev, curr, table, eq)
