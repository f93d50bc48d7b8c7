"""Tests for the snapshot builder."""

from __future__ import annotations

import sys
from types import SimpleNamespace
from typing import Any

import pytest

from story_inspector.errors import InvalidRootError, StateDepthError
from story_inspector.inspect.kinds import Kind
from story_inspector.inspect.snapshot import build, build_shallow


class TestBuildRoot:
    """Tests for what build() accepts as a root."""

    def test_leaf_root_raises(self) -> None:
        with pytest.raises(InvalidRootError) as exc_info:
            build(5)
        assert exc_info.value.kind == "number"

    def test_invalid_root_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            build(print)
        with pytest.raises(TypeError):
            build(None)

    def test_empty_root_uses_plain_kind(self) -> None:
        """The root is classified without the empty variants."""
        tree = build([])

        assert tree.kind is Kind.ARRAY
        assert tree.keys == ()
        assert tree.items == ()
        assert tree.size == 0

    def test_root_path_is_kept(self) -> None:
        tree = build({"a": 1}, path="State")

        assert tree.path == "State"
        assert tree.items[0].path == "State.get('a')"


class TestBuildChildren:
    """Tests for child nodes."""

    def test_keys_and_items_align(self) -> None:
        tree = build({"b": "two", "a": 1})

        assert tree.keys == ("a", "b")
        assert [item.path for item in tree.items] == ["a", "b"]
        assert [item.value for item in tree.items] == [1, "two"]
        assert tree.size == 2

    def test_children_use_empty_variants(self) -> None:
        tree = build({"list": [], "map": {}, "obj": SimpleNamespace()})

        kinds = {item.path: item.kind for item in tree.items}
        assert kinds == {
            "list": Kind.EMPTY_ARRAY,
            "map": Kind.EMPTY_MAP,
            "obj": Kind.EMPTY_OBJECT,
        }
        for item in tree.items:
            assert item.keys == ()
            assert item.size == 0

    def test_leaves_have_no_children(self) -> None:
        tree = build(["lantern"])
        leaf = tree.items[0]

        assert leaf.kind is Kind.STRING
        assert leaf.keys is None
        assert leaf.items is None
        assert not leaf.is_container

    def test_callables_are_omitted(self) -> None:
        tree = build({"on_enter": print, "turn": 1, "hook": lambda: None})

        assert tree.keys == ("turn",)

    def test_values_are_referenced_not_copied(self) -> None:
        bag = ["rope"]
        tree = build({"bag": bag})

        assert tree.items[0].value is bag


class TestCyclesAndSharing:
    """Tests for cyclic and shared values."""

    def test_self_reference_is_cut(self) -> None:
        room = SimpleNamespace(name="cellar")
        room.next = room

        tree = build(room)

        assert tree.keys == ("name",)
        assert tree.size == 1

    def test_longer_cycle_is_cut_at_the_repeat(self) -> None:
        a: dict = {"id": "a"}
        b: dict = {"id": "b", "back": a}
        a["to"] = b

        tree = build(a)
        b_node = tree.find("to")

        assert tree.keys == ("id", "to")
        assert b_node is not None
        assert b_node.keys == ("id",)

    def test_diamond_is_expanded_on_every_path(self) -> None:
        """A shared acyclic value is not mistaken for a cycle."""
        shared = [1]
        tree = build({"a": shared, "b": shared})

        assert tree.find("a[0]") is not None
        assert tree.find("b[0]") is not None
        assert tree.find("a").value is tree.find("b").value


class TestIgnore:
    """Tests for ignore paths."""

    def test_ignored_child_and_subtree_omitted(self) -> None:
        state = {"secret": {"code": 1}, "turn": 2}

        tree = build(state, ignore={"State.get('secret')"}, path="State")

        assert tree.keys == ("turn",)
        assert tree.find("State.get('secret').get('code')") is None

    def test_nested_ignore(self) -> None:
        state = {"player": SimpleNamespace(name="Wren", mood="calm")}

        tree = build(state, ignore=frozenset({"player.mood"}))

        assert tree.find("player").keys == ("name",)

    def test_root_path_is_never_ignored(self) -> None:
        tree = build({"a": 1}, ignore={"State"}, path="State")

        assert tree.keys == ("a",)


class TestBuildShallow:
    """Tests for build_shallow()."""

    def test_children_are_not_expanded(self) -> None:
        tree = build_shallow({"rooms": {"hall": {}, "cellar": {}}, "turn": 3})

        rooms = tree.find("rooms")
        assert rooms is not None
        assert rooms.keys == ("cellar", "hall")
        assert rooms.size == 2
        assert rooms.items is None
        assert rooms.is_container
        assert tree.find("turn").value == 3

    def test_shallow_honours_ignore_and_self_reference(self) -> None:
        state: dict = {"a": 1, "b": 2}
        state["me"] = state

        tree = build_shallow(state, ignore={"b"})

        assert tree.keys == ("a",)

    def test_shallow_invalid_root(self) -> None:
        with pytest.raises(InvalidRootError):
            build_shallow("text")


class TestDeepState:
    """Tests for state nested past the interpreter recursion limit."""

    def test_build_raises_depth_error(self) -> None:
        nested: list[Any] = []
        for _ in range(sys.getrecursionlimit() + 100):
            nested = [nested]

        with pytest.raises(StateDepthError, match="snapshot") as exc_info:
            build({"deep": nested})
        assert isinstance(exc_info.value, RecursionError)


class TestTreeNode:
    """Tests for TreeNode traversal helpers."""

    def test_walk_is_depth_first(self) -> None:
        tree = build({"a": [1, 2], "b": 3})

        assert [node.path for node in tree.walk()] == ["", "a", "a[0]", "a[1]", "b"]

    def test_find_missing(self) -> None:
        assert build({"a": 1}).find("b") is None
