"""Registry of ignored state paths.

The snapshot builder and the diff engine only ever read a set of path strings.
IgnoreRegistry is the host-side owner of that set: it keeps the paths in the
order they were added and can persist them to a JSON file (a plain array of
path strings) so an ignore list survives between sessions.

Usage:
    registry = IgnoreRegistry.load("~/.story_inspector/ignored.json")
    registry.add("State.turn_counter")
    tree = build(state, registry.paths(), path="State")
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import cast

from story_inspector.errors import IgnoreFileError
from story_inspector.util.json_utils import JSONSchema, json

IGNORE_FILE_SCHEMA = JSONSchema({
    "type": "array",
    "items": {"type": "string"},
})


class IgnoreRegistry:
    """Ordered, de-duplicated list of ignored paths with optional file backing."""

    _paths: list[str]
    _file: Path | None

    def __init__(self, paths: Iterable[str] = (), file: str | Path | None = None) -> None:
        self._paths = list(dict.fromkeys(paths))
        self._file = Path(file).expanduser() if file is not None else None

    @classmethod
    def load(cls, file: str | Path) -> IgnoreRegistry:
        """Load a registry from a JSON file; a missing file gives an empty registry.

        Raises:
            IgnoreFileError: If the file is not valid JSON or not an array of strings
        """
        path = Path(file).expanduser()
        if not path.exists():
            return cls(file=path)
        try:
            data = json.load(path)
            IGNORE_FILE_SCHEMA.validate(data)
        except json.JSONDecodeError as e:
            raise IgnoreFileError(f"{path}: not valid JSON ({e.msg})") from e
        except ValueError as e:
            raise IgnoreFileError(f"{path}: {e}") from e
        return cls(cast(list[str], data), file=path)

    def save(self) -> None:
        """Write the paths back to the file the registry was loaded from."""
        if self._file is None:
            raise ValueError("IgnoreRegistry has no backing file")
        json.dump(self._file, list(self._paths))

    def add(self, path: str) -> bool:
        """Add a path. Returns False if it was already present."""
        if path in self._paths:
            return False
        self._paths.append(path)
        if self._file is not None:
            self.save()
        return True

    def remove(self, path: str) -> bool:
        """Remove a path. Returns False if it was not present."""
        if path not in self._paths:
            return False
        self._paths.remove(path)
        if self._file is not None:
            self.save()
        return True

    def paths(self) -> frozenset[str]:
        """Immutable view handed to `build`, `compare_raw` and the tracker."""
        return frozenset(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)
