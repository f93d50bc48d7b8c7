"""Annotated snapshot tree."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from story_inspector.inspect.keys import Key
from story_inspector.inspect.kinds import Kind


@dataclass(frozen=True)
class TreeNode:
    """One node of a snapshot.

    Nodes are produced fresh by every snapshot and never mutated. `value` is
    the live value, not a copy, so only `keys` and `items` record the shape the
    container had when the snapshot was taken.

    Attributes:
        path: Full address from the traversal root
        kind: Classification of the value
        value: The live value
        size: Number of visible children (containers only)
        keys: Sorted child keys (containers only)
        items: Child nodes in the same order as `keys` (containers only; None
            for containers captured without expanding them)
    """

    path: str
    kind: Kind
    value: Any
    size: int | None = None
    keys: tuple[Key, ...] | None = None
    items: tuple[TreeNode, ...] | None = None

    @property
    def is_container(self) -> bool:
        return self.keys is not None

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and every descendant, depth first."""
        yield self
        for item in self.items or ():
            yield from item.walk()

    def find(self, path: str) -> TreeNode | None:
        """Return the descendant (or self) with the given path."""
        for node in self.walk():
            if node.path == path:
                return node
        return None
