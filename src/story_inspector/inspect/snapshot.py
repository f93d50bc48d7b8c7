"""Snapshot utility for capturing the shape of the story state.

A snapshot is a `TreeNode` tree built by walking the live state. Values are
referenced, not copied; the tree records which keys each container had and
the node built for each of them, which is everything the diff engine needs.

Cycles are cut per branch: a child that is one of its own ancestors on the
current path is left out. Shared but acyclic values (diamonds) are expanded
once per path that reaches them. Children whose path is in the ignore set are
left out the same way, together with their whole subtree.

For a deep copy of the state instead of an annotated tree, see `clone`.
"""

from __future__ import annotations

import time
from collections.abc import Container
from typing import Any, TypeAlias

from story_inspector.errors import InvalidRootError, StateDepthError
from story_inspector.inspect.keys import get_child, get_keys
from story_inspector.inspect.kinds import Kind, classify
from story_inspector.inspect.paths import full_path
from story_inspector.inspect.TreeNode import TreeNode
from story_inspector.observability.logging import get_logger

IgnoreSet: TypeAlias = Container[str]
"""Anything supporting `path in ignore`; usually a frozenset of path strings."""

_log = get_logger("snapshot")


def _build_node(
    value: Any,
    kind: Kind,
    ignore: IgnoreSet,
    path: str,
    ancestors: set[int],
) -> TreeNode:
    if not kind.is_container:
        return TreeNode(path=path, kind=kind, value=value)

    ancestors.add(id(value))
    keys: list[Any] = []
    items: list[TreeNode] = []
    for key in get_keys(value):
        child = get_child(value, key)
        child_path = full_path(path, value, key)
        if child_path in ignore or id(child) in ancestors:
            continue
        keys.append(key)
        items.append(_build_node(child, classify(child), ignore, child_path, ancestors))
    ancestors.discard(id(value))

    return TreeNode(
        path=path,
        kind=kind,
        value=value,
        size=len(keys),
        keys=tuple(keys),
        items=tuple(items),
    )


def _root_kind(root: Any) -> Kind:
    kind = classify(root, ignore_empty=True)
    if not kind.is_container:
        raise InvalidRootError(kind)
    return kind


def build(root: Any, ignore: IgnoreSet = frozenset(), path: str = "") -> TreeNode:
    """Snapshot a container into a `TreeNode` tree.

    The root is classified without the empty variants; every descendant is
    classified with them, so an empty child list is tagged "empty array".

    Args:
        root: The live array, map or object to walk
        ignore: Paths to leave out, matched verbatim against each child path
        path: Address given to the root; children of an empty root path are
            addressed by their bare key

    Returns:
        The root node of the snapshot

    Raises:
        InvalidRootError: If `root` is not a container
        StateDepthError: If the state nests deeper than the recursion limit
    """
    kind = _root_kind(root)
    started = time.perf_counter()
    try:
        tree = _build_node(root, kind, ignore, path, set())
    except RecursionError as e:
        raise StateDepthError("snapshot") from e
    _log.debug(
        "snapshot_built",
        path=path,
        size=tree.size,
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
    )
    return tree


def build_shallow(root: Any, ignore: IgnoreSet = frozenset(), path: str = "") -> TreeNode:
    """Snapshot only the first level of a container.

    Container children report their size and keys but are not expanded
    (`items` is None), which makes the result unsuitable for `compare`.

    Raises:
        InvalidRootError: If `root` is not a container
    """
    kind = _root_kind(root)
    keys: list[Any] = []
    items: list[TreeNode] = []
    for key in get_keys(root):
        child = get_child(root, key)
        child_path = full_path(path, root, key)
        if child_path in ignore or child is root:
            continue
        child_kind = classify(child)
        if child_kind.is_container:
            child_keys = tuple(get_keys(child))
            node = TreeNode(
                path=child_path,
                kind=child_kind,
                value=child,
                size=len(child_keys),
                keys=child_keys,
            )
        else:
            node = TreeNode(path=child_path, kind=child_kind, value=child)
        keys.append(key)
        items.append(node)
    return TreeNode(
        path=path,
        kind=kind,
        value=root,
        size=len(keys),
        keys=tuple(keys),
        items=tuple(items),
    )
