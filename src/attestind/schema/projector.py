"""Render decoded value trees as JSON using field names from the schema.

Leaf rules
----------
- bool / str      → passed through
- int (any width) → decimal string, never a JSON number
- bytes / address → lowercase ``0x`` hex, empty bytes → ``""``

Structural mismatches (e.g. a tuple field paired with a scalar) project to
``None`` for that field only; the rest of the record is still rendered.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from attestind.schema.types import ArrayType, FieldType, Primitive, SchemaField, TupleType

JsonValue = None | bool | str | list[Any] | dict[str, Any]


def hex_or_empty(value: bytes) -> str:
    return "0x" + value.hex() if value else ""


def leaf_to_json(value: Any) -> JsonValue:
    """Convert a primitive decoded value; nested sequences become plain arrays."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return hex_or_empty(bytes(value))
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return [leaf_to_json(v) for v in value]
    return None


def project_value(field_type: FieldType, value: Any) -> JsonValue:
    match field_type:
        case Primitive():
            return leaf_to_json(value)
        case TupleType(fields=fields) if isinstance(value, tuple):
            return project(fields, value)
        case ArrayType(item=item) if isinstance(value, list):
            return [project_value(item, v) for v in value]
    return None


def project(fields: Sequence[SchemaField], values: Sequence[Any]) -> dict[str, JsonValue]:
    """Pair `fields` with `values` by position and build a JSON object.

    Duplicate field names keep the last value.
    """
    obj: dict[str, JsonValue] = {}
    for f, v in zip(fields, values):
        obj[f.name] = project_value(f.type, v)
    return obj
