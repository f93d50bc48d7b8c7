"""Deep copy of the story state for raw-value diffing.

`clone` is the alternative to `snapshot.build`: instead of annotating the
live state it copies it, so the copy can later be compared with `compare_raw`
after the live state has moved on. Callables and opaque objects are dropped.

Aliasing is preserved: every source container is cloned at most once, and
all references to it resolve to the same clone. The clone is registered
before its children are copied, which is what terminates cycles.
"""

from __future__ import annotations

import dataclasses
from types import SimpleNamespace
from typing import Any, TypeAlias

from story_inspector.inspect.keys import get_child, get_keys
from story_inspector.inspect.kinds import Kind, classify

CloneMap: TypeAlias = dict[int, Any]
"""Source container id -> its (possibly unfinished) clone."""


def _empty_like(value: Any, kind: Kind) -> Any:
    match kind.family:
        case Kind.ARRAY:
            return []
        case Kind.MAP:
            return {}
        case _ if isinstance(value, SimpleNamespace):
            return SimpleNamespace()
        case _:
            # Dataclass: same class, fields filled in below without running __init__
            return object.__new__(type(value))


def _store(target: Any, kind: Kind, key: Any, value: Any) -> None:
    match kind.family:
        case Kind.ARRAY:
            target.append(value)
        case Kind.MAP:
            target[key] = value
        case _:
            # object.__setattr__ also works on frozen dataclasses
            object.__setattr__(target, key, value)


def clone(value: Any, clones: CloneMap | None = None) -> Any:
    """Deep-copy a value graph, dropping callables and opaque objects.

    Arrays are copied into lists (tuples included) and compacted, maps into
    dicts, dataclass instances into new instances of the same class, and
    namespaces into `SimpleNamespace`.

    Args:
        value: The value to copy
        clones: Identity map shared across one cloning run; pass a dict to
            reuse clones between several calls, or leave None for a fresh run

    Returns:
        The copy, or `value` itself for leaves
    """
    kind = classify(value)
    if not kind.is_container:
        return value
    if clones is None:
        clones = {}
    if id(value) in clones:
        return clones[id(value)]

    result = _empty_like(value, kind)
    clones[id(value)] = result
    for key in get_keys(value):
        _store(result, kind, key, clone(get_child(value, key), clones))
    return result
