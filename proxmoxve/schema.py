"""A small schema model for data sources.

A ``Resource`` describes the attributes a data source exposes: each
attribute has a ``Schema`` giving its value type and whether the caller
must supply it or the source computes it.  ``ResourceData`` holds the
attribute values of one read, checked against the resource's schema.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Union


class ValueType(enum.Enum):
    """The type of an attribute value."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    LIST = "list"
    MAP = "map"
    SET = "set"


@dataclass
class Schema:
    """The description of one attribute."""

    type: ValueType
    description: str = ""
    required: bool = False
    computed: bool = False
    force_new: bool = False
    elem: Union["Schema", "Resource", None] = None

    def zero(self) -> Any:
        """Return the value an unset attribute of this type reads as."""
        if self.type is ValueType.BOOL:
            return False
        if self.type is ValueType.INT:
            return 0
        if self.type is ValueType.FLOAT:
            return 0.0
        if self.type is ValueType.STRING:
            return ""
        if self.type is ValueType.MAP:
            return {}
        return []

    def coerce(self, key: str, value: Any) -> Any:
        """Check ``value`` against this schema and return the stored form."""
        if value is None:
            return self.zero()
        kind = self.type
        if kind is ValueType.STRING:
            if not isinstance(value, str):
                raise TypeError(f"{key}: expected a string, got {value!r}")
            return value
        if kind is ValueType.BOOL:
            if not isinstance(value, bool):
                raise TypeError(f"{key}: expected a boolean, got {value!r}")
            return value
        if kind is ValueType.INT:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{key}: expected an integer, got {value!r}")
            return value
        if kind is ValueType.FLOAT:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"{key}: expected a number, got {value!r}")
            return float(value)
        if kind is ValueType.MAP:
            if not isinstance(value, Mapping):
                raise TypeError(f"{key}: expected a mapping, got {value!r}")
            return dict(value)
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
            raise TypeError(f"{key}: expected a collection, got {value!r}")
        items = list(value)
        if kind is ValueType.SET:
            unique: list[Any] = []
            for item in items:
                if item not in unique:
                    unique.append(item)
            return unique
        return items


@dataclass
class Resource:
    """A data source: its attribute schemas and the function that reads it."""

    schema: dict[str, Schema] = field(default_factory=dict)
    reader: Callable[[Any, "ResourceData"], None] | None = None

    def required_keys(self) -> set[str]:
        return {key for key, spec in self.schema.items() if spec.required}

    def computed_keys(self) -> set[str]:
        return {key for key, spec in self.schema.items() if spec.computed}

    def value_types(self) -> dict[str, ValueType]:
        return {key: spec.type for key, spec in self.schema.items()}

    def nested(self, key: str) -> Resource:
        """Return the resource that describes the elements of attribute ``key``."""
        elem = self.schema[key].elem
        if not isinstance(elem, Resource):
            raise ValueError(f"attribute {key!r} has no nested schema")
        return elem

    def read(self, client: Any, data: ResourceData) -> None:
        """Fill ``data`` from ``client``; errors from the client propagate."""
        if self.reader is None:
            raise ValueError("resource has no read function")
        self.reader(client, data)


class ResourceData:
    """The attribute values and identifier of one data source read."""

    def __init__(self, resource: Resource, values: Mapping[str, Any] | None = None) -> None:
        self.resource = resource
        self.id = ""
        self._values: dict[str, Any] = {}
        for key, value in (values or {}).items():
            self.set(key, value)

    def _spec(self, key: str) -> Schema:
        try:
            return self.resource.schema[key]
        except KeyError:
            raise KeyError(f"unknown attribute {key!r}") from None

    def get(self, key: str) -> Any:
        spec = self._spec(key)
        if key in self._values:
            return self._values[key]
        return spec.zero()

    def set(self, key: str, value: Any) -> None:
        self._values[key] = self._spec(key).coerce(key, value)