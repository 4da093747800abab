"""Tests for deep_equal and diff_objects."""

import typing as _typing

import pytest as _pytest

import layered_settings.merging.equality as equality


class TestDeepEqualScalars:
    """Scalars compare by JSON kind and value."""

    @_pytest.mark.parametrize(
        "value",
        [42, 0, -1, 1.5, "hello", "", True, False, None],
    )
    def test_equal_to_itself(self, value: _typing.Any) -> None:
        assert equality.deep_equal(value, value) is True

    @_pytest.mark.parametrize(
        ("a", "b"),
        [
            (1, 2),
            ("a", "b"),
            (True, False),
            (1, "1"),
            (0, False),
            (1, True),
            ("", False),
            (None, {}),
            (None, 0),
        ],
    )
    def test_not_equal(self, a: _typing.Any, b: _typing.Any) -> None:
        assert equality.deep_equal(a, b) is False
        assert equality.deep_equal(b, a) is False

    def test_int_equals_float(self) -> None:
        """JSON has a single number kind."""
        assert equality.deep_equal(1, 1.0) is True

    def test_nan_is_not_equal_to_itself(self) -> None:
        nan = float("nan")
        assert equality.deep_equal(nan, nan) is False


class TestDeepEqualObjects:
    """Objects compare key-by-key, arrays element-by-element."""

    def test_empty_objects(self) -> None:
        assert equality.deep_equal({}, {}) is True

    def test_key_order_ignored(self) -> None:
        assert equality.deep_equal({"a": 1, "b": 2}, {"b": 2, "a": 1}) is True

    def test_different_values(self) -> None:
        assert equality.deep_equal({"a": 1}, {"a": 2}) is False

    def test_extra_keys(self) -> None:
        assert equality.deep_equal({"a": 1}, {"a": 1, "b": 2}) is False
        assert equality.deep_equal({"a": 1, "b": 2}, {"a": 1}) is False

    def test_same_count_different_keys(self) -> None:
        assert equality.deep_equal({"a": 1}, {"b": 1}) is False

    def test_nested(self) -> None:
        assert equality.deep_equal({"a": {"b": {"c": 1}}}, {"a": {"b": {"c": 1}}}) is True
        assert equality.deep_equal({"a": {"b": {"c": 1}}}, {"a": {"b": {"c": 2}}}) is False

    def test_arrays_are_ordered(self) -> None:
        assert equality.deep_equal([], []) is True
        assert equality.deep_equal([1, 2, 3], [1, 2, 3]) is True
        assert equality.deep_equal([1, 2, 3], [3, 2, 1]) is False
        assert equality.deep_equal([1, 2], [1, 2, 3]) is False

    def test_array_equals_index_keyed_object(self) -> None:
        """Arrays compare as objects keyed by index."""
        assert equality.deep_equal([1, 2], {"0": 1, "1": 2}) is True
        assert equality.deep_equal([1, 2], {0: 1, 1: 2}) is True

    def test_nested_arrays_of_objects(self) -> None:
        a = [{"x": 1}, {"y": [2, 3]}]
        b = [{"x": 1}, {"y": [2, 3]}]
        c = [{"x": 1}, {"y": [2, 4]}]
        assert equality.deep_equal(a, b) is True
        assert equality.deep_equal(a, c) is False

    def test_nested_bool_number_distinction(self) -> None:
        assert equality.deep_equal({"flag": True}, {"flag": 1}) is False


class TestDiffObjects:
    """diff_objects reports a flat added/changed/removed delta."""

    def test_identical(self) -> None:
        diff = equality.diff_objects({"a": 1, "b": 2}, {"a": 1, "b": 2})
        assert diff.added == {}
        assert diff.changed == {}
        assert diff.removed == []
        assert diff.is_empty

    def test_added(self) -> None:
        diff = equality.diff_objects({"a": 1}, {"a": 1, "b": 2})
        assert diff.added == {"b": 2}
        assert diff.changed == {}
        assert diff.removed == []

    def test_changed(self) -> None:
        diff = equality.diff_objects({"a": 1}, {"a": 2})
        assert diff.changed == {"a": 2}
        assert not diff.is_empty

    def test_removed(self) -> None:
        diff = equality.diff_objects({"a": 1, "b": 2}, {"a": 1})
        assert diff.removed == ["b"]

    def test_combined(self) -> None:
        diff = equality.diff_objects({"a": 1, "b": 2}, {"a": 99, "c": 3})
        assert diff.added == {"c": 3}
        assert diff.changed == {"a": 99}
        assert diff.removed == ["b"]

    def test_nested_equal_not_changed(self) -> None:
        assert equality.diff_objects({"a": {"b": 1}}, {"a": {"b": 1}}).is_empty

    def test_nested_change_reports_whole_value(self) -> None:
        diff = equality.diff_objects({"a": {"b": 1}}, {"a": {"b": 2}})
        assert diff.changed == {"a": {"b": 2}}

    def test_array_changes(self) -> None:
        assert equality.diff_objects({"arr": [1, 2, 3]}, {"arr": [1, 2, 3]}).is_empty
        assert equality.diff_objects({"arr": [1, 2, 3]}, {"arr": [3, 2, 1]}).changed == {
            "arr": [3, 2, 1]
        }
        assert equality.diff_objects({"arr": [1, 2]}, {"arr": [1, 2, 3]}).changed == {
            "arr": [1, 2, 3]
        }

    def test_only_removed_key_listed(self) -> None:
        old = {"theme": "dark", "fontSize": 14, "language": "en"}
        new = {"theme": "dark", "language": "en"}
        assert equality.diff_objects(old, new).removed == ["fontSize"]

    def test_removed_in_prev_order(self) -> None:
        diff = equality.diff_objects({"z": 1, "a": 2, "m": 3}, {})
        assert diff.removed == ["z", "a", "m"]

    def test_none_value_counts_as_present(self) -> None:
        """A key holding None is present; absence is what counts as missing."""
        assert equality.diff_objects({"a": None}, {}).removed == ["a"]
        assert equality.diff_objects({}, {"a": None}).added == {"a": None}
        assert equality.diff_objects({"a": None}, {"a": None}).is_empty

    def test_applying_delta_reproduces_curr(self) -> None:
        """prev + added + changed - removed == curr."""
        prev = {"keep": 1, "change": [1, 2], "drop": "x", "nested": {"a": 1}}
        curr = {"keep": 1, "change": [2, 1], "nested": {"a": 2}, "new": None}
        diff = equality.diff_objects(prev, curr)

        result = dict(prev)
        result.update(diff.added)
        result.update(diff.changed)
        for key in diff.removed:
            del result[key]
        assert result == curr
