"""Value classification for story state.

Every value reachable from the story state is assigned one `Kind`. The
classifier is the single source of truth for the tag: the key enumerator,
the snapshot builder, the cloning engine and the diff engine all dispatch on it.

Python values map onto kinds as follows:

    str                                  -> string
    numbers.Number (not bool)            -> number
    bool                                 -> boolean
    None                                 -> null
    UNDEFINED                            -> undefined
    callables                            -> function
    list, tuple                          -> array / empty array
    dict                                 -> map / empty map
    dataclass instance, SimpleNamespace  -> object / empty object
    anything else                        -> other
"""

from __future__ import annotations

import dataclasses
import enum
import numbers
from types import SimpleNamespace
from typing import Any, Final


class _Undefined:
    """Sentinel type for a missing value (there is no native `undefined`)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final = _Undefined()


class Kind(enum.StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    UNDEFINED = "undefined"
    FUNCTION = "function"
    ARRAY = "array"
    EMPTY_ARRAY = "empty array"
    MAP = "map"
    EMPTY_MAP = "empty map"
    OBJECT = "object"
    EMPTY_OBJECT = "empty object"
    OTHER = "other"

    @property
    def family(self) -> Kind:
        """The container tag with the `empty` variant collapsed."""
        return _FAMILY.get(self, self)

    @property
    def is_container(self) -> bool:
        return self.family in (Kind.ARRAY, Kind.MAP, Kind.OBJECT)

    @property
    def is_leaf(self) -> bool:
        return self in LEAF_KINDS


_FAMILY: dict[Kind, Kind] = {
    Kind.EMPTY_ARRAY: Kind.ARRAY,
    Kind.EMPTY_MAP: Kind.MAP,
    Kind.EMPTY_OBJECT: Kind.OBJECT,
}

LEAF_KINDS: Final = frozenset(
    {Kind.STRING, Kind.NUMBER, Kind.BOOLEAN, Kind.NULL, Kind.UNDEFINED}
)


def is_record(value: Any) -> bool:
    """True for values addressed by attribute name (dataclass instances, namespaces)."""
    if isinstance(value, SimpleNamespace):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def record_size(value: Any) -> int:
    if isinstance(value, SimpleNamespace):
        return len(vars(value))
    return sum(1 for f in dataclasses.fields(value) if hasattr(value, f.name))


def classify(value: Any, ignore_empty: bool = False) -> Kind:
    """Map an arbitrary value to its `Kind`.

    Args:
        value: Any Python value
        ignore_empty: When True, empty containers report the same tag as
            non-empty ones ("array" instead of "empty array")

    Returns:
        The kind tag. Never raises.
    """
    if value is None:
        return Kind.NULL
    if value is UNDEFINED:
        return Kind.UNDEFINED
    # bool is a Number subclass, so it must be checked first
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, numbers.Number):
        return Kind.NUMBER
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, (list, tuple)):
        return Kind.ARRAY if ignore_empty or value else Kind.EMPTY_ARRAY
    if isinstance(value, dict):
        return Kind.MAP if ignore_empty or value else Kind.EMPTY_MAP
    if callable(value):
        return Kind.FUNCTION
    if is_record(value):
        return Kind.OBJECT if ignore_empty or record_size(value) else Kind.EMPTY_OBJECT
    return Kind.OTHER


def is_plain_data(value: Any) -> bool:
    """False for callables and opaque host objects, which the inspector never traverses."""
    return classify(value, ignore_empty=True) not in (Kind.FUNCTION, Kind.OTHER)
