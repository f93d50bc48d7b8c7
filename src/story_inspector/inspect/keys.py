"""Child key enumeration and access for the three container kinds."""

from __future__ import annotations

import dataclasses
from types import SimpleNamespace
from typing import Any, TypeAlias

from story_inspector.inspect.kinds import Kind, classify, is_plain_data

Key: TypeAlias = int | str | Any
"""Array index, attribute name, or dict key."""


def _declared_names(record: Any) -> list[str]:
    if isinstance(record, SimpleNamespace):
        return list(vars(record))
    return [f.name for f in dataclasses.fields(record) if hasattr(record, f.name)]


def _sorted_keys(keys: list[Any]) -> list[Any]:
    try:
        return sorted(keys)
    except TypeError:
        # Mixed key types (e.g. 1 and "a") have no natural order
        return sorted(keys, key=lambda k: (type(k).__name__, str(k)))


def get_keys(container: Any) -> list[Key]:
    """List the child keys of a container, sorted ascending.

    Indices for arrays, declared keys for maps and objects. Keys whose value is
    a callable or an opaque object are left out. The sort makes two trees built
    over equal data produce identical key sequences.

    Args:
        container: Any value; non-containers have no keys

    Returns:
        Sorted list of keys
    """
    match classify(container, ignore_empty=True):
        case Kind.ARRAY:
            return [i for i, item in enumerate(container) if is_plain_data(item)]
        case Kind.MAP:
            return _sorted_keys([k for k, v in container.items() if is_plain_data(v)])
        case Kind.OBJECT:
            return sorted(
                name
                for name in _declared_names(container)
                if is_plain_data(getattr(container, name))
            )
        case _:
            return []


def get_child(container: Any, key: Key) -> Any:
    if classify(container, ignore_empty=True) is Kind.OBJECT:
        return getattr(container, key)
    return container[key]
