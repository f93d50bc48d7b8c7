from __future__ import annotations

import reprlib
from dataclasses import dataclass
from typing import Any

_short = reprlib.Repr()
_short.maxlevel = 3
_short.maxstring = 80
_short.maxother = 80


@dataclass(frozen=True)
class DiffRecord:
    """One reported difference between two snapshots.

    Attributes:
        path: Address of the container or value the change was found at
        message: Human-readable description
        new_value: The value in the newer snapshot, when relevant
        old_value: The value in the older snapshot, when relevant
        added_values: Values (or keys) present only in the newer snapshot
        removed_values: Values (or keys) present only in the older snapshot
    """

    path: str
    message: str
    new_value: Any = None
    old_value: Any = None
    added_values: tuple[Any, ...] | None = None
    removed_values: tuple[Any, ...] | None = None

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        """Log-friendly form; values are shortened reprs (safe on cyclic state)."""
        data = {"path": self.path, "message": self.message}
        for name in ("new_value", "old_value", "added_values", "removed_values"):
            value = getattr(self, name)
            if value is not None:
                data[name] = _short.repr(value)
        return data
