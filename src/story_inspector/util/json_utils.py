from __future__ import annotations

import json as _json
from pathlib import Path
from typing import Any, TypeAlias

import jsonschema


JSONPyPrimitive: TypeAlias = str | int | float | bool | None
"""Python primitives that convert to JSON without special treatment."""

JSONPyDict: TypeAlias = dict[str, "JSONPyValue"]

JSONPyList: TypeAlias = list["JSONPyValue"]

JSONPyValue: TypeAlias = JSONPyPrimitive | JSONPyDict | JSONPyList


class JSONSchema(dict[str, JSONPyValue]):
    """A validated JSON Schema dictionary.

    Validates against the JSON Schema meta-schema to ensure the schema is well-formed.
    """

    def __new__(cls, data: Any) -> JSONSchema:
        if not isinstance(data, dict):
            raise TypeError("JSONSchema must be a dict")
        try:
            jsonschema.Draft202012Validator.check_schema(data)
        except jsonschema.SchemaError as e:
            raise TypeError(f"Invalid JSON Schema: {e.message}") from e
        return super().__new__(cls, data)

    def __reduce__(self) -> tuple[type[JSONSchema], tuple[dict[str, Any]]]:
        """Support pickling and deepcopy."""
        return (JSONSchema, (dict(self),))

    def validate(self, value: JSONPyValue) -> None:
        """Check a value against this schema.

        Raises:
            ValueError: If the value does not conform
        """
        try:
            jsonschema.Draft202012Validator(dict(self)).validate(value)
        except jsonschema.ValidationError as e:
            raise ValueError(e.message) from e


class json:
    """Typed wrapper around the standard json module."""

    JSONPyPrimitive = JSONPyPrimitive
    JSONPyValue = JSONPyValue
    JSONDecodeError = _json.JSONDecodeError

    @staticmethod
    def load(path: str | Path) -> JSONPyValue:
        """Load JSON from a file path.

        Args:
            path: Path to the JSON file (string or Path object)

        Returns:
            The parsed JSON value
        """
        return _json.loads(Path(path).read_text())

    @staticmethod
    def dump(path: str | Path, json_val: JSONPyValue) -> None:
        """Write a value to a file as indented JSON, creating parent directories."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(_json.dumps(json_val, indent=2) + "\n")
