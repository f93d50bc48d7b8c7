"""Comparison of two snapshots into a list of `DiffRecord`s.

Rules, applied at every position in this order:

1. Different kinds: one "type changed" record, no recursion. "array" and
   "empty array" are different kinds here.
2. Leaves (string, number, boolean, null, undefined): "value changed" when
   the values differ.
3. Arrays are compared as multisets of element values, not index by index.
   Leaves count by value, containers by identity. Removals are reported in
   one record and suppress move detection (a removal already explains any
   shift); without removals, positions whose element differs are reported as
   moved. Additions are reported in one record. Leaf elements that exist on
   both sides are then compared pairwise; container elements are not
   descended into.
4. Maps and objects: removed keys in one record, one record per added key,
   then recursion into every shared key.

`compare` works on trees from `snapshot.build`. `compare_raw` applies the same
rules to plain values, typically two results of `clone`, with a depth bound.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Sequence
from typing import Any

from story_inspector.diff.DiffRecord import DiffRecord
from story_inspector.errors import PathConsistencyError, StateDepthError
from story_inspector.inspect.keys import Key, get_child, get_keys
from story_inspector.inspect.kinds import Kind, classify
from story_inspector.inspect.paths import child_path
from story_inspector.inspect.snapshot import IgnoreSet
from story_inspector.inspect.TreeNode import TreeNode
from story_inspector.observability.logging import get_logger

DEFAULT_MAX_DEPTH = 10

_log = get_logger("diff")


def _identity(value: Any) -> tuple[Kind, Any]:
    """Multiset key: leaves compare by value, containers by identity."""
    kind = classify(value, ignore_empty=True)
    if kind.is_leaf:
        return kind, value
    return kind, id(value)


def _count(n: int, singular: str, plural: str) -> str:
    return f"{n} {singular if n == 1 else plural}"


def _type_changed(path: str, new_kind: Kind, old_kind: Kind, new: Any, old: Any) -> DiffRecord:
    return DiffRecord(
        path=path,
        message=f"Value type changed from '{old_kind}' to '{new_kind}'",
        new_value=new,
        old_value=old,
    )


def _leaf_diff(path: str, new: Any, old: Any) -> list[DiffRecord]:
    # Identity first: NaN is not equal to itself
    if new is old or new == old:
        return []
    return [DiffRecord(path=path, message="Value changed", new_value=new, old_value=old)]


def _sequence_diffs(
    path: str, new_array: Any, new_values: Sequence[Any], old_values: Sequence[Any]
) -> list[DiffRecord]:
    new_ids = [_identity(v) for v in new_values]
    old_ids = [_identity(v) for v in old_values]
    new_counts = Counter(new_ids)
    old_counts = Counter(old_ids)

    by_id = dict(zip(old_ids, old_values)) | dict(zip(new_ids, new_values))
    removed: list[Any] = []
    added: list[Any] = []
    for ident in dict.fromkeys(new_ids + old_ids):
        delta = new_counts[ident] - old_counts[ident]
        if delta < 0:
            removed.extend([by_id[ident]] * -delta)
        elif delta > 0:
            added.extend([by_id[ident]] * delta)

    diffs: list[DiffRecord] = []
    if removed:
        diffs.append(
            DiffRecord(
                path=path,
                message=f"{_count(len(removed), 'value', 'values')} removed from array",
                new_value=new_array,
                removed_values=tuple(removed),
            )
        )
    else:
        moved = sum(1 for n, o in zip(new_ids, old_ids) if n != o)
        if moved:
            diffs.append(
                DiffRecord(
                    path=path,
                    message=f"{_count(moved, 'item', 'items')} in array moved",
                    new_value=new_array,
                )
            )
    if added:
        diffs.append(
            DiffRecord(
                path=path,
                message=f"{_count(len(added), 'value', 'values')} added to array",
                new_value=new_array,
                added_values=tuple(added),
            )
        )
    return diffs


def _key_sets(
    new_keys: Sequence[Key], old_keys: Sequence[Key]
) -> tuple[list[Key], list[Key], list[Key]]:
    """Split keys into (added, removed, shared), each in sorted key order."""
    new_set = set(new_keys)
    old_set = set(old_keys)
    added = [k for k in new_keys if k not in old_set]
    removed = [k for k in old_keys if k not in new_set]
    shared = [k for k in new_keys if k in old_set]
    return added, removed, shared


def _removed_keys(path: str, old_mapping: Any, removed: list[Key]) -> DiffRecord:
    names = ", ".join(f'"{k}"' for k in removed)
    return DiffRecord(
        path=path,
        message=f"{_count(len(removed), 'property', 'properties')} removed: {names}",
        old_value=old_mapping,
        removed_values=tuple(removed),
    )


def _added_key(path: str, key: Key, value: Any) -> DiffRecord:
    return DiffRecord(
        path=path,
        message=f'Property added: "{key}"',
        new_value=value,
        added_values=(key,),
    )


# -- tree comparison ---------------------------------------------------------


def _children(node: TreeNode) -> dict[str, TreeNode]:
    if node.items is None:
        raise PathConsistencyError(node.path, None, f"{node.path} (not expanded)")
    children: dict[str, TreeNode] = {}
    for key, item in zip(node.keys or (), node.items):
        if item.path in children:
            raise PathConsistencyError(node.path, key, item.path, duplicate=True)
        children[item.path] = item
    return children


def _child(node: TreeNode, children: dict[str, TreeNode], key: Key) -> TreeNode:
    expected = child_path(node.path, node.kind, key)
    try:
        return children[expected]
    except KeyError:
        raise PathConsistencyError(node.path, key, expected) from None


def _compare_nodes(new: TreeNode, old: TreeNode) -> list[DiffRecord]:
    if new.kind != old.kind:
        return [_type_changed(new.path, new.kind, old.kind, new.value, old.value)]
    if new.kind.is_leaf:
        return _leaf_diff(new.path, new.value, old.value)

    match new.kind.family:
        case Kind.ARRAY:
            new_items = tuple(_children(new).values())
            old_items = tuple(_children(old).values())
            diffs = _sequence_diffs(
                new.path,
                new.value,
                [item.value for item in new_items],
                [item.value for item in old_items],
            )
            for new_item in new_items:
                if not new_item.kind.is_leaf:
                    continue
                ident = _identity(new_item.value)
                old_item = next(
                    (o for o in old_items if o.kind.is_leaf and _identity(o.value) == ident),
                    None,
                )
                if old_item is not None:
                    diffs.extend(_compare_nodes(new_item, old_item))
            return diffs

        case Kind.MAP | Kind.OBJECT:
            new_children = _children(new)
            old_children = _children(old)
            added, removed, shared = _key_sets(new.keys or (), old.keys or ())
            diffs = []
            if removed:
                diffs.append(_removed_keys(new.path, old.value, removed))
            for key in added:
                diffs.append(_added_key(new.path, key, _child(new, new_children, key).value))
            for key in shared:
                diffs.extend(
                    _compare_nodes(
                        _child(new, new_children, key),
                        _child(old, old_children, key),
                    )
                )
            return diffs

        case _:
            # function / other never carry data
            return []


def compare(new_tree: TreeNode, old_tree: TreeNode) -> list[DiffRecord]:
    """Compare two snapshots built by `snapshot.build`.

    Args:
        new_tree: The more recent snapshot
        old_tree: The earlier snapshot

    Returns:
        Differences in traversal order; empty when nothing changed

    Raises:
        PathConsistencyError: If a key present in both trees has no child
            node at the path it encodes to, or two sibling keys share a path
        StateDepthError: If the trees nest deeper than the recursion limit
    """
    started = time.perf_counter()
    try:
        diffs = _compare_nodes(new_tree, old_tree)
    except RecursionError as e:
        raise StateDepthError("compare") from e
    _log.debug(
        "trees_compared",
        path=new_tree.path,
        diffs=len(diffs),
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
    )
    return diffs


# -- raw value comparison ----------------------------------------------------


def _visible(value: Any, kind: Kind, path: str, ignore: IgnoreSet) -> list[Key]:
    keys: list[Key] = []
    seen: set[str] = set()
    for key in get_keys(value):
        key_path = child_path(path, kind, key)
        if key_path in ignore:
            continue
        if key_path in seen:
            raise PathConsistencyError(path, key, key_path, duplicate=True)
        seen.add(key_path)
        keys.append(key)
    return keys


def _compare_values(
    new: Any, old: Any, path: str, max_depth: int, ignore: IgnoreSet, depth: int
) -> list[DiffRecord]:
    new_kind = classify(new)
    old_kind = classify(old)
    if new_kind != old_kind:
        return [_type_changed(path, new_kind, old_kind, new, old)]
    if new_kind.is_leaf:
        return _leaf_diff(path, new, old)
    if not new_kind.is_container or new is old:
        return []

    explore = depth < max_depth
    new_keys = _visible(new, new_kind, path, ignore)
    old_keys = _visible(old, old_kind, path, ignore)

    if new_kind.family is Kind.ARRAY:
        new_values = [get_child(new, k) for k in new_keys]
        old_values = [get_child(old, k) for k in old_keys]
        diffs = _sequence_diffs(path, new, new_values, old_values)
        if explore:
            for new_key, value in zip(new_keys, new_values):
                if not classify(value).is_leaf:
                    continue
                ident = _identity(value)
                pair = next(
                    (
                        (k, v)
                        for k, v in zip(old_keys, old_values)
                        if classify(v).is_leaf and _identity(v) == ident
                    ),
                    None,
                )
                if pair is not None:
                    diffs.extend(
                        _compare_values(
                            value,
                            pair[1],
                            child_path(path, new_kind, new_key),
                            max_depth,
                            ignore,
                            depth + 1,
                        )
                    )
        return diffs

    added, removed, shared = _key_sets(new_keys, old_keys)
    diffs = []
    if removed:
        diffs.append(_removed_keys(path, old, removed))
    for key in added:
        diffs.append(_added_key(path, key, get_child(new, key)))
    if explore:
        for key in shared:
            new_child = get_child(new, key)
            old_child = get_child(old, key)
            if new_child is old_child:
                continue
            diffs.extend(
                _compare_values(
                    new_child,
                    old_child,
                    child_path(path, new_kind, key),
                    max_depth,
                    ignore,
                    depth + 1,
                )
            )
    return diffs


def compare_raw(
    new_value: Any,
    old_value: Any,
    path: str = "",
    max_depth: int = DEFAULT_MAX_DEPTH,
    ignore: IgnoreSet = frozenset(),
) -> list[DiffRecord]:
    """Compare two plain values, typically two results of `clone`.

    Containers that are the same object on both sides are treated as
    unchanged without being descended into.

    Args:
        new_value: The more recent value
        old_value: The earlier value
        path: Address of the values, used as the prefix of every record path
        max_depth: Nesting level below which children are not compared; also
            bounds the walk on cyclic values
        ignore: Child paths to leave out

    Returns:
        Differences in traversal order; empty when nothing changed

    Raises:
        PathConsistencyError: If two sibling keys encode to the same path
        StateDepthError: If a large `max_depth` lets the walk exceed the
            recursion limit
    """
    started = time.perf_counter()
    try:
        diffs = _compare_values(new_value, old_value, path, max_depth, ignore, 0)
    except RecursionError as e:
        raise StateDepthError("compare") from e
    _log.debug(
        "values_compared",
        path=path,
        diffs=len(diffs),
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
    )
    return diffs
