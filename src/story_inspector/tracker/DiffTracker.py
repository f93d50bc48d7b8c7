"""DiffTracker - holds the last snapshot between checks.

The snapshot and diff functions keep no state of their own. DiffTracker is the
caller that threads the previous tree into the next comparison: each `check`
builds a fresh tree of the live state, compares it with the one from the
previous check, keeps the new tree, and notifies subscribers when something
changed.

Usage:
    tracker = DiffTracker(lambda: engine.state.variables, ignore=registry)
    tracker.subscribe(lambda diffs, affects: print(*diffs, sep="\\n"))

    tracker.check()        # first call takes the baseline
    ...                    # story advances
    result = tracker.check()
    if result.failed:
        ...
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from story_inspector.config import InspectorConfig
from story_inspector.diff.compare import compare
from story_inspector.errors import InspectorError
from story_inspector.ignore.IgnoreRegistry import IgnoreRegistry
from story_inspector.inspect.snapshot import IgnoreSet, build
from story_inspector.inspect.TreeNode import TreeNode
from story_inspector.observability.logging import get_logger
from story_inspector.tracker.CheckResult import CheckResult
from story_inspector.tracker.Subscribers import SubscriberCallback, Subscribers

_log = get_logger("tracker")


class DiffTracker:
    _get_state: Callable[[], Any]
    _ignore: IgnoreRegistry | IgnoreSet
    _root_path: str
    _last: TreeNode | None
    _subscribers: Subscribers

    def __init__(
        self,
        get_state: Callable[[], Any],
        ignore: IgnoreRegistry | IgnoreSet = frozenset(),
        root_path: str = "State",
    ) -> None:
        """Create a tracker for the state returned by `get_state`.

        Args:
            get_state: Returns the live root container on every call
            ignore: Ignored paths; a registry is re-read on every check so
                paths added between checks take effect immediately
            root_path: Address given to the root in every snapshot
        """
        self._get_state = get_state
        self._ignore = ignore
        self._root_path = root_path
        self._last = None
        self._subscribers = Subscribers()

    @classmethod
    def from_config(cls, get_state: Callable[[], Any], config: InspectorConfig) -> DiffTracker:
        ignore = (
            IgnoreRegistry.load(config.ignore_file)
            if config.ignore_file
            else IgnoreRegistry()
        )
        return cls(get_state, ignore=ignore, root_path=config.root_path)

    @property
    def last(self) -> TreeNode | None:
        """The snapshot the next check will be compared against."""
        return self._last

    def _ignore_set(self) -> IgnoreSet:
        if isinstance(self._ignore, IgnoreRegistry):
            return self._ignore.paths()
        return self._ignore

    def _snapshot(self) -> TreeNode:
        return build(self._get_state(), self._ignore_set(), self._root_path)

    def subscribe(self, callback: SubscriberCallback) -> Callable[[], None]:
        """Register a callback for checks that find differences.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def reset(self) -> None:
        """Forget the last snapshot; the next check takes a new baseline."""
        self._last = None

    def check(self) -> CheckResult:
        """Snapshot the live state and compare it with the previous snapshot.

        Engine failures are returned as a failed result and leave the previous
        snapshot in place for the next check.
        """
        started = time.perf_counter()
        try:
            tree = self._snapshot()
            if self._last is None:
                self._last = tree
                elapsed = time.perf_counter() - started
                _log.info("baseline_taken", path=self._root_path, size=tree.size)
                return CheckResult.ok([], elapsed, baseline=True)
            diffs = compare(tree, self._last)
        except InspectorError as e:
            elapsed = time.perf_counter() - started
            _log.error("check_failed", path=self._root_path, error=str(e))
            return CheckResult.failure(e, elapsed)

        self._last = tree
        elapsed = time.perf_counter() - started
        if diffs:
            _log.info("diffs_found", count=len(diffs), elapsed_ms=round(elapsed * 1000, 3))
            for record in diffs:
                _log.info("diff", **record.to_dict())
            self._subscribers.notify(diffs)
        return CheckResult.ok(diffs, elapsed)
