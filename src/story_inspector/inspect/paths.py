"""Path strings addressing locations in the story state.

A path is built by appending one fragment per step from the traversal root:

    array    [3]
    map      .get('gold')
    object   .name           (identifier keys)
             ['first name']  (any other key)

An empty parent path yields the bare key text instead of a fragment, so the
children of an unnamed root are addressed as `gold`, `3`, ... These exact
strings are what ignore lists store, so every producer must agree byte for
byte. `parse_path` is the inverse; `to_spec` turns a stored path into a glom
spec, which `resolve` and `assign` use to read or edit the live value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from glom import GlomError, T, glom
from glom import assign as glom_assign
from glom.core import TType

from story_inspector.errors import PathAssignmentError, PathResolutionError, PathSyntaxError
from story_inspector.inspect.keys import Key, get_child
from story_inspector.inspect.kinds import Kind, classify

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_simple_key(key: str) -> bool:
    return _IDENTIFIER.fullmatch(key) is not None


def fragment(kind: Kind, key: Key) -> str:
    """Render one child access for a container of the given kind."""
    match kind.family:
        case Kind.ARRAY:
            return f"[{key}]"
        case Kind.MAP:
            return f".get('{key}')"
        case _:
            text = str(key)
            return f".{text}" if is_simple_key(text) else f"['{text}']"


def child_path(parent_path: str, kind: Kind, key: Key) -> str:
    if not parent_path:
        return str(key)
    return parent_path + fragment(kind, key)


def full_path(parent_path: str, container: Any, key: Key) -> str:
    """Address of `container[key]` given the address of `container`."""
    return child_path(parent_path, classify(container, ignore_empty=True), key)


Accessor: TypeAlias = Literal["bare", "attr", "item", "index", "get"]


@dataclass(frozen=True)
class PathSegment:
    """One parsed step of a path.

    Attributes:
        accessor: How the step was written: `bare` (leading key of an unnamed
            root), `attr` (.name), `item` (['key']), `index` ([3]) or
            `get` (.get('key'))
        key: The key text, or an int for `index`
    """

    accessor: Accessor
    key: str | int


_SEGMENT = re.compile(
    r"""\.get\('(?P<get>.*?)'\)
      | \.(?P<attr>[A-Za-z_][A-Za-z0-9_]*)
      | \['(?P<item>.*?)'\]
      | \[(?P<index>[0-9]+)\]
    """,
    re.VERBOSE,
)


def parse_path(path: str) -> list[PathSegment]:
    """Split a path string into segments.

    Raises:
        PathSyntaxError: If part of the string is not a valid fragment
    """
    segments: list[PathSegment] = []
    pos = 0
    if path and path[0] not in ".[":
        end = min((i for i in (path.find("."), path.find("[")) if i != -1), default=len(path))
        segments.append(PathSegment("bare", path[:end]))
        pos = end
    while pos < len(path):
        match = _SEGMENT.match(path, pos)
        if match is None:
            raise PathSyntaxError(path, pos)
        if match["get"] is not None:
            segments.append(PathSegment("get", match["get"]))
        elif match["attr"] is not None:
            segments.append(PathSegment("attr", match["attr"]))
        elif match["item"] is not None:
            segments.append(PathSegment("item", match["item"]))
        else:
            segments.append(PathSegment("index", int(match["index"])))
        pos = match.end()
    return segments


def _locate(current: Any, segment: PathSegment, path: str) -> Key:
    """Find the actual key in `current` that a segment refers to."""
    kind = classify(current, ignore_empty=True)
    text = str(segment.key)
    if kind is Kind.ARRAY and segment.accessor in ("bare", "index"):
        if text.isdigit() and int(text) < len(current):
            return int(text)
    elif kind is Kind.MAP and segment.accessor in ("bare", "get", "item"):
        if text in current:
            return text
        # Non-string keys are rendered with str() in paths
        for key in current:
            if str(key) == text:
                return key
    elif kind is Kind.OBJECT and segment.accessor in ("bare", "attr", "item"):
        if hasattr(current, text):
            return text
    raise PathResolutionError(
        f"{path!r}: no {segment.accessor} step {text!r} in a value of kind '{kind}'"
    )


def _split_root(path: str, root_path: str) -> str:
    if not root_path:
        return path
    if path == root_path or path.startswith(root_path) and path[len(root_path)] in ".[":
        return path[len(root_path):]
    raise PathResolutionError(f"{path!r} is not under root {root_path!r}")


def to_spec(root: Any, path: str, root_path: str = "") -> TType:
    """Translate a path into a glom `T` spec over `root`.

    Which accessor a step needs depends on the value it is applied to (map
    keys are items, object keys are attributes, and a non-string map key is
    written as its text), so each step is matched against the live value.

    Raises:
        PathSyntaxError: If the path is malformed
        PathResolutionError: If a step does not exist in the root
    """
    spec = T
    current = root
    for segment in parse_path(_split_root(path, root_path)):
        key = _locate(current, segment, path)
        if classify(current, ignore_empty=True) is Kind.OBJECT:
            spec = getattr(spec, key)
        else:
            spec = spec[key]
        current = get_child(current, key)
    return spec


def resolve(root: Any, path: str, root_path: str = "") -> Any:
    """Read the live value a path points to.

    Args:
        root: The traversal root the path was built from
        path: A path produced by `full_path`
        root_path: The path the root itself was given when snapshotting
            (e.g. "State"); stripped before resolving

    Raises:
        PathSyntaxError: If the path is malformed
        PathResolutionError: If a step does not exist in the root
    """
    spec = to_spec(root, path, root_path)
    try:
        return glom(root, spec)
    except GlomError as e:
        raise PathResolutionError(f"{path!r}: {e}") from e


def assign(root: Any, path: str, value: Any, root_path: str = "") -> None:
    """Write a value at the location a path points to, in place.

    Raises:
        PathResolutionError: If the path is the root itself or does not exist
        PathAssignmentError: If the container holding the value is immutable
            (tuples, frozen dataclasses)
    """
    if not parse_path(_split_root(path, root_path)):
        raise PathResolutionError("cannot assign to the root itself")
    spec = to_spec(root, path, root_path)
    try:
        glom_assign(root, spec, value)
    except (GlomError, TypeError, AttributeError) as e:
        raise PathAssignmentError(path, e) from e
