"""Tests for snapshot comparison."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import pytest

from story_inspector.diff.compare import compare
from story_inspector.errors import PathConsistencyError
from story_inspector.inspect.kinds import Kind
from story_inspector.inspect.snapshot import build, build_shallow
from story_inspector.inspect.TreeNode import TreeNode


@dataclass
class Player:
    name: str
    health: int = 10
    bag: list[str] = field(default_factory=list)


def messages(diffs: list[Any]) -> list[tuple[str, str]]:
    return [(d.path, d.message) for d in diffs]


class TestCompareBasics:
    """Tests for leaf and kind changes."""

    def test_same_tree_has_no_diffs(self) -> None:
        state = {"player": Player(name="Wren", bag=["rope"]), "turn": 1}
        tree = build(state)

        assert compare(tree, tree) == []
        assert compare(build(state), build(state)) == []

    def test_equal_data_built_separately(self) -> None:
        state = {"a": {"b": [1, "x"]}, "c": None}

        assert compare(build(copy.deepcopy(state)), build(state)) == []
        assert compare(build({"c": None, "d": 1}), build({"d": 1, "c": None})) == []

    def test_leaf_value_changed(self) -> None:
        state = {"turn": 1}
        old = build(state)
        state["turn"] = 2

        diffs = compare(build(state), old)

        assert len(diffs) == 1
        assert diffs[0].path == "turn"
        assert diffs[0].message == "Value changed"
        assert diffs[0].new_value == 2
        assert diffs[0].old_value == 1

    def test_type_changed(self) -> None:
        state: dict[str, Any] = {"door": "locked"}
        old = build(state)
        state["door"] = None

        diffs = compare(build(state), old)

        assert messages(diffs) == [("door", "Value type changed from 'string' to 'null'")]

    def test_empty_to_non_empty_is_a_type_change(self) -> None:
        """Empty containers carry their own kind, so filling one is a kind change."""
        state: dict[str, Any] = {"bag": []}
        old = build(state)
        state["bag"] = ["rope"]

        diffs = compare(build(state), old)

        assert messages(diffs) == [("bag", "Value type changed from 'empty array' to 'array'")]

    def test_kind_change_does_not_recurse(self) -> None:
        state: dict[str, Any] = {"x": {"a": 1}}
        old = build(state)
        state["x"] = [1]

        diffs = compare(build(state), old)

        assert len(diffs) == 1
        assert diffs[0].old_value == {"a": 1}

    def test_nested_change_path(self) -> None:
        state = {"a": {"b": {"c": 1}}}
        old = build(state)
        state["a"]["b"]["c"] = 2

        diffs = compare(build(state), old)

        assert messages(diffs) == [("a.get('b').get('c')", "Value changed")]

    def test_object_attribute_path(self) -> None:
        state = {"player": Player(name="Wren")}
        old = build(state, path="State")
        state["player"].health = 7

        diffs = compare(build(state, path="State"), old)

        assert messages(diffs) == [("State.get('player').health", "Value changed")]


class TestCompareArrays:
    """Tests for multiset array comparison."""

    def diff(self, old_items: list[Any], new_items: list[Any]) -> list[Any]:
        return compare(build({"xs": new_items}), build({"xs": old_items}))

    def test_reorder_is_a_move(self) -> None:
        diffs = self.diff([1, 2, 3], [3, 1, 2])

        assert messages(diffs) == [("xs", "3 items in array moved")]

    def test_only_displaced_positions_count(self) -> None:
        diffs = self.diff([1, 2, 2], [2, 1, 2])

        assert messages(diffs) == [("xs", "2 items in array moved")]

    def test_removal_suppresses_move(self) -> None:
        """A removal already explains the shift of later elements."""
        diffs = self.diff([1, 2, 3], [1, 3])

        assert messages(diffs) == [("xs", "1 value removed from array")]
        assert diffs[0].removed_values == (2,)

    def test_addition(self) -> None:
        diffs = self.diff(["lantern"], ["lantern", "key"])

        assert messages(diffs) == [("xs", "1 value added to array")]
        assert diffs[0].added_values == ("key",)
        assert diffs[0].new_value == ["lantern", "key"]

    def test_replace_reports_removal_and_addition(self) -> None:
        diffs = self.diff(["lantern", "rope"], ["lantern", "key"])

        assert messages(diffs) == [
            ("xs", "1 value removed from array"),
            ("xs", "1 value added to array"),
        ]

    def test_duplicates_are_counted(self) -> None:
        diffs = self.diff([1, 1, 2], [1, 2])

        assert messages(diffs) == [("xs", "1 value removed from array")]
        assert diffs[0].removed_values == (1,)

    def test_multiple_removed(self) -> None:
        diffs = self.diff([1, 2, 3, 4], [4])

        assert messages(diffs) == [("xs", "3 values removed from array")]

    def test_bool_and_number_are_distinct(self) -> None:
        """True == 1 in Python, but the kinds differ."""
        diffs = self.diff([1], [True])

        assert messages(diffs) == [
            ("xs", "1 value removed from array"),
            ("xs", "1 value added to array"),
        ]

    def test_container_elements_compare_by_identity(self) -> None:
        """Mutating an element in place is invisible; replacing it is not."""
        room = {"lit": False}
        state: dict[str, Any] = {"rooms": [room]}
        old = build(state)
        room["lit"] = True

        assert compare(build(state), old) == []

        state["rooms"] = [{"lit": True}]
        diffs = compare(build(state), old)

        assert messages(diffs) == [
            ("rooms", "1 value removed from array"),
            ("rooms", "1 value added to array"),
        ]


class TestCompareMappings:
    """Tests for map and object comparison."""

    def test_removed_and_added_keys(self) -> None:
        state = {"a": 1, "b": 2}
        old = build(state)
        del state["b"]
        state["c"] = 3

        diffs = compare(build(state), old)

        assert messages(diffs) == [
            ("", '1 property removed: "b"'),
            ("", 'Property added: "c"'),
        ]
        assert diffs[0].removed_values == ("b",)
        assert diffs[1].added_values == ("c",)
        assert diffs[1].new_value == 3

    def test_removed_keys_share_one_record(self) -> None:
        state = {"a": 1, "b": 2, "c": 3}
        old = build(state)
        state.clear()
        state["z"] = 0

        diffs = compare(build(state), old)

        assert diffs[0].message == '3 properties removed: "a", "b", "c"'
        assert [d.message for d in diffs[1:]] == ['Property added: "z"']

    def test_one_record_per_added_key(self) -> None:
        ns = SimpleNamespace(a=1)
        old = build({"ns": ns})
        ns.b = 2
        ns.c = 3

        diffs = compare(build({"ns": ns}), old)

        assert messages(diffs) == [
            ("ns", 'Property added: "b"'),
            ("ns", 'Property added: "c"'),
        ]

    def test_added_then_shared_order(self) -> None:
        state: dict[str, Any] = {"a": 1}
        old = build(state)
        state["a"] = 2
        state["b"] = 1

        diffs = compare(build(state), old)

        assert messages(diffs) == [("", 'Property added: "b"'), ("a", "Value changed")]


class TestCompareIgnoreAndCycles:
    """Tests for ignored paths and cyclic state."""

    def test_ignored_changes_are_invisible(self) -> None:
        ignore = frozenset({"State.get('clock')"})
        state = {"clock": 1, "turn": 1}
        old = build(state, ignore=ignore, path="State")
        state["clock"] = 99

        assert compare(build(state, ignore=ignore, path="State"), old) == []

    def test_cyclic_state(self) -> None:
        state: dict[str, Any] = {"n": 1}
        state["self"] = state
        old = build(state)
        state["n"] = 2

        diffs = compare(build(state), old)

        assert messages(diffs) == [("n", "Value changed")]


class TestPathConsistency:
    """Tests for trees whose keys and child paths disagree."""

    def test_mismatched_child_path_raises(self) -> None:
        def tree(value: int) -> TreeNode:
            child = TreeNode(path="wrong", kind=Kind.NUMBER, value=value)
            return TreeNode(
                path="", kind=Kind.MAP, value={"a": value}, size=1, keys=("a",), items=(child,)
            )

        with pytest.raises(PathConsistencyError) as exc_info:
            compare(tree(2), tree(1))

        assert exc_info.value.expected_path == "a"
        assert exc_info.value.key == "a"

    def test_unexpanded_children_raise(self) -> None:
        state = {"rooms": {"hall": 1}}

        with pytest.raises(PathConsistencyError):
            compare(build_shallow(state), build_shallow(state))

    def test_sibling_keys_sharing_a_path_raise(self) -> None:
        """The map keys 1 and "1" are both addressed as .get('1')."""
        old = build({1: "a", "1": "b"}, path="State")
        new = build({1: "Z", "1": "b"}, path="State")

        with pytest.raises(PathConsistencyError, match="shares the path") as exc_info:
            compare(new, old)

        assert exc_info.value.expected_path == "State.get('1')"


class TestCompareSpecialLeaves:
    """Tests for leaf values that are not equal to themselves."""

    def test_unchanged_nan_is_not_a_change(self) -> None:
        state = {"score": math.nan, "name": "x"}

        assert compare(build(state, path="State"), build(state, path="State")) == []

    def test_nan_in_array_is_not_a_change(self) -> None:
        state = {"scores": [1.0, math.nan]}

        assert compare(build(state), build(state)) == []

    def test_nan_replacing_a_number_is_a_change(self) -> None:
        state = {"score": 1.0}
        old = build(state)
        state["score"] = math.nan

        assert messages(compare(build(state), old)) == [("score", "Value changed")]
