"""Subscription management for DiffTracker."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import TypeAlias

from story_inspector.diff.DiffRecord import DiffRecord

# Callback receives the diffs of one check and an `affects` function to test paths
SubscriberCallback: TypeAlias = Callable[[Sequence[DiffRecord], Callable[[str], bool]], None]


def _related(a: str, b: str) -> bool:
    """True if one path is the other or lies below it."""
    if len(a) < len(b):
        a, b = b, a
    # An empty path is the unnamed root, above everything
    return not b or a == b or (a.startswith(b) and a[len(b)] in ".[")


def _make_affects(diffs: Sequence[DiffRecord]) -> Callable[[str], bool]:
    """Create an `affects` helper from the diffs of one check.

    A path is affected when a record was reported at that path, below it, or
    above it: records such as "Property added" or "items moved" are reported
    at the container and may concern any of its children.

    Args:
        diffs: Records produced by one comparison

    Returns:
        Function that takes a path string and returns True if that path was changed
    """
    paths = {record.path for record in diffs}

    def affects(path: str) -> bool:
        return any(_related(path, changed) for changed in paths)

    return affects


class Subscribers:
    """Manages tracker subscription callbacks.

    Subscribers receive the list of diffs and an `affects(path)` function, and
    are only called for checks that found differences.
    """

    _callbacks: list[SubscriberCallback]

    def __init__(self) -> None:
        self._callbacks = []

    def append(self, callback: SubscriberCallback) -> None:
        """Add a subscription callback."""
        self._callbacks.append(callback)

    def remove(self, callback: SubscriberCallback) -> None:
        """Remove a subscription callback."""
        self._callbacks.remove(callback)

    def notify(self, diffs: Sequence[DiffRecord]) -> None:
        """Notify all subscribers of state changes.

        Args:
            diffs: The records found by the latest check
        """
        if not diffs:
            return

        affects = _make_affects(diffs)
        for callback in self._callbacks:
            callback(diffs, affects)

    def __iter__(self) -> Iterator[SubscriberCallback]:
        """Allow iteration over callbacks."""
        return iter(self._callbacks)

    def __len__(self) -> int:
        """Return number of subscribers."""
        return len(self._callbacks)
