"""Map schema field types onto `eth_abi` parameter types.

The resolver is the only place where the schema's own type vocabulary meets
the ABI codec: widths are checked against what `eth_abi` can decode
(8..256 bit integers in steps of 8, 1..32 byte fixed arrays).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import ABIType, parse

from attestind.schema.types import ArrayType, FieldType, Primitive, SchemaField, TupleType


def _check_width(field_type: Primitive) -> int:
    size = field_type.size
    if not isinstance(size, int) or isinstance(size, bool):
        raise TypeError(f"{field_type.kind} requires an integer width, got {size!r}")
    if field_type.kind == "fixed_bytes":
        if not 1 <= size <= 32:
            raise TypeError(f"bytes{size}: byte width must be within 1..32")
    elif size % 8 != 0 or not 8 <= size <= 256:
        raise TypeError(f"{field_type.kind}{size}: bit width must be a multiple of 8 within 8..256")
    return size


def to_type_str(field_type: FieldType) -> str:
    """Render the canonical ABI type string, e.g. ``"(uint8,bool)[]"``."""
    match field_type:
        case Primitive(kind="int" | "uint"):
            return f"{field_type.kind}{_check_width(field_type)}"
        case Primitive(kind="fixed_bytes"):
            return f"bytes{_check_width(field_type)}"
        case Primitive(kind="bool" | "bytes" | "string" | "address"):
            return field_type.kind
        case TupleType(fields=fields):
            return "(" + ",".join(to_type_str(f.type) for f in fields) + ")"
        case ArrayType(item=item):
            return f"{to_type_str(item)}[]"
    raise TypeError(f"Unsupported field type: {field_type!r}")


def resolve_type(field_type: FieldType) -> ABIType:
    """Resolve one field type into a validated `eth_abi` grammar type.

    :raise TypeError:
        If a width cannot be resolved to a size `eth_abi` supports.
    """
    type_str = to_type_str(field_type)
    try:
        abi_type = parse(type_str)
        abi_type.validate()
    except (ParseError, ABITypeError) as e:
        raise TypeError(f"Cannot resolve {type_str!r}: {e}") from e
    return abi_type


def resolve_fields(fields: Iterable[SchemaField]) -> list[ABIType]:
    """Resolve every field of a parsed schema, preserving order."""
    return [resolve_type(f.type) for f in fields]


def to_type_strs(types: Sequence[ABIType]) -> list[str]:
    return [t.to_type_str() for t in types]
