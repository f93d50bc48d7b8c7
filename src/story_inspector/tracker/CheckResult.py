from __future__ import annotations

from dataclasses import dataclass

from story_inspector.diff.DiffRecord import DiffRecord
from story_inspector.errors import InspectorError


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one tracker check.

    A failed check is never reported as an empty diff list: `failed` tells the
    two apart, and `diffs` is always empty on failure.

    Attributes:
        diffs: Differences since the previous snapshot
        error: The engine error when the check failed
        elapsed: Seconds spent snapshotting and comparing
        baseline: True when this check only took the first snapshot
    """

    diffs: tuple[DiffRecord, ...] = ()
    error: InspectorError | None = None
    elapsed: float = 0.0
    baseline: bool = False

    @classmethod
    def ok(cls, diffs: list[DiffRecord], elapsed: float, baseline: bool = False) -> CheckResult:
        return cls(diffs=tuple(diffs), elapsed=elapsed, baseline=baseline)

    @classmethod
    def failure(cls, error: InspectorError, elapsed: float) -> CheckResult:
        return cls(error=error, elapsed=elapsed)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def changed(self) -> bool:
        return bool(self.diffs)
