"""Typed property values and graph records."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Optional, Union

from ..errors import ValidationError

PropertyValue = Union[None, bool, int, float, str, List["PropertyValue"]]
Properties = Dict[str, PropertyValue]

# Property names the store and interchange layers repurpose.
NODE_ID_KEY = "__id"
LABEL_KEY = "__label"
TYPE_KEY = "__type"
LEGACY_TYPE_KEY = "type"
WEIGHT_KEY = "weight"


class Direction(str, Enum):
    """Adjacency direction relative to a node."""

    OUT = "out"
    IN = "in"

    @classmethod
    def coerce(cls, value: "str | Direction") -> "Direction":
        try:
            return cls(value)
        except ValueError as exc:
            raise ValidationError(f"Unknown direction: {value!r}") from exc


@dataclass
class Edge:
    """A directed, weighted connection and its independent property map."""

    source: int
    target: int
    weight: float = 1.0
    properties: Properties = field(default_factory=dict)


@dataclass(frozen=True)
class GraphStats:
    nodes: int
    edges: int


class Path(NamedTuple):
    """Hop count and visited node ids of a shortest path."""

    distance: int
    nodes: List[int]


def normalize_value(value: object, *, key: str = "") -> PropertyValue:
    """Return ``value`` as a member of the closed property value variant.

    Tuples become lists.  Anything else outside ``None``, ``bool``, ``int``,
    finite ``float``, ``str`` and lists of those raises :class:`ValidationError`.
    """

    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"Property {key!r} holds a non-finite float")
        return value
    if isinstance(value, (list, tuple)):
        return [normalize_value(item, key=key) for item in value]
    raise ValidationError(f"Property {key!r} has unsupported type {type(value).__name__}")


def normalize_properties(properties: Optional[Mapping[str, object]]) -> Properties:
    normalized: Properties = {}
    for key, value in (properties or {}).items():
        if not isinstance(key, str):
            raise ValidationError(f"Property names must be strings, got {key!r}")
        normalized[key] = normalize_value(value, key=key)
    return normalized


def encode_field(value: PropertyValue) -> str:
    """Serialise a property value for storage in a map field."""

    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except ValueError as exc:
        raise ValidationError(f"Property value cannot be stored: {exc}") from exc


def decode_field(raw: str) -> PropertyValue:
    """Inverse of :func:`encode_field`.

    Fields written by other clients as plain text come back as strings.
    """

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


__all__ = [
    "Direction",
    "Edge",
    "GraphStats",
    "LABEL_KEY",
    "LEGACY_TYPE_KEY",
    "NODE_ID_KEY",
    "Path",
    "Properties",
    "PropertyValue",
    "TYPE_KEY",
    "WEIGHT_KEY",
    "decode_field",
    "encode_field",
    "normalize_properties",
    "normalize_value",
]
