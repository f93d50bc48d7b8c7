"""Exceptions raised by the inspector's entry points.

Classification, key enumeration and path encoding never raise. Only the
top-level operations (build, clone, compare, path resolution, ignore-file
loading) do, and every failure is scoped to the call that raised it.
"""

from __future__ import annotations


class InspectorError(Exception):
    """Base class for all inspector failures."""


class InvalidRootError(InspectorError, TypeError):
    """A snapshot was requested on a value that is not a container."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            f"snapshot root must be an array, map or object, got '{kind}'"
        )
        self.kind = kind


class PathConsistencyError(InspectorError, RuntimeError):
    """A snapshot node does not map its keys onto children one to one.

    Raised when a key shared by two trees has no child at the path it encodes
    to, and when two sibling keys encode to the same path (e.g. the map keys
    `1` and `"1"`, both addressed as `.get('1')`).
    """

    def __init__(
        self, path: str, key: object, expected_path: str, duplicate: bool = False
    ) -> None:
        if duplicate:
            message = f"key {key!r} under {path!r} shares the path {expected_path!r} with a sibling"
        else:
            message = f"no child with path {expected_path!r} for key {key!r} under {path!r}"
        super().__init__(message)
        self.path = path
        self.key = key
        self.expected_path = expected_path


class PathSyntaxError(InspectorError, ValueError):
    """A path string could not be parsed."""

    def __init__(self, path: str, position: int) -> None:
        super().__init__(f"malformed path {path!r} at position {position}")
        self.path = path
        self.position = position


class PathResolutionError(InspectorError, LookupError):
    """A well-formed path does not lead to a value in the given root."""


class IgnoreFileError(InspectorError, ValueError):
    """The persisted ignore-path file is not a JSON array of strings."""


class PathAssignmentError(InspectorError, TypeError):
    """The container at the end of a path cannot be written to."""

    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(f"cannot assign at {path!r}: {cause}")
        self.path = path


class StateDepthError(InspectorError, RecursionError):
    """The state is nested more deeply than the interpreter's recursion limit allows."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"state too deeply nested to {operation}")
        self.operation = operation
