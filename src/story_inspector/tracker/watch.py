"""Polling loop driving a DiffTracker.

The delay between checks adapts to how long the last check took, so a large
story state is polled less often than a small one.
"""

from __future__ import annotations

import asyncio

from story_inspector.config import PollConfig
from story_inspector.tracker.DiffTracker import DiffTracker


def next_delay(elapsed: float, poll: PollConfig) -> float:
    """Seconds to wait after a check that took `elapsed` seconds."""
    return min(max(elapsed * poll.factor, poll.min_delay), poll.max_delay)


async def watch(
    tracker: DiffTracker,
    poll: PollConfig | None = None,
    stop: asyncio.Event | None = None,
    max_checks: int | None = None,
) -> int:
    """Check the tracker repeatedly until `stop` is set.

    Each check runs synchronously on the event loop: the snapshot walk and the
    comparison block the loop for their whole duration, and subscribers are
    called on the loop thread. The walk must stay on the thread that mutates
    the live state. The adaptive delay keeps the share of loop time spent
    checking near `1 / (factor + 1)`.

    Args:
        tracker: The tracker to drive; its subscribers receive the diffs
        poll: Delay settings (defaults to PollConfig())
        stop: Event that ends the loop; checked between checks
        max_checks: Stop after this many checks

    Returns:
        The number of checks performed
    """
    poll = poll or PollConfig()
    stop = stop or asyncio.Event()
    checks = 0
    while not stop.is_set():
        result = tracker.check()
        checks += 1
        if max_checks is not None and checks >= max_checks:
            break
        try:
            await asyncio.wait_for(stop.wait(), timeout=next_delay(result.elapsed, poll))
        except TimeoutError:
            pass
    return checks
