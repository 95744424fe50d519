"""Field type tree produced by the schema parser.

A schema such as ``"uint256 amount, tuple(address to, bool ok)[] legs"`` parses into::

    [
        SchemaField(Primitive("uint", 256), "amount"),
        SchemaField(ArrayType(TupleType((SchemaField(Primitive("address"), "to"),
                                         SchemaField(Primitive("bool"), "ok")))), "legs"),
    ]

The tree is immutable and finite; nodes never reference their parents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PrimitiveKind = Literal["bool", "int", "uint", "fixed_bytes", "bytes", "string", "address"]

DEFAULT_FIELD_NAME = "field"


@dataclass(frozen=True, slots=True)
class Primitive:
    """Leaf type. `size` is the bit width for int/uint and the byte width for fixed_bytes."""

    kind: PrimitiveKind
    size: int | None = None

    def __str__(self) -> str:
        match self.kind:
            case "int" | "uint":
                return f"{self.kind}{self.size}"
            case "fixed_bytes":
                return f"bytes{self.size}"
        return self.kind


@dataclass(frozen=True, slots=True)
class TupleType:
    fields: tuple[SchemaField, ...]

    def __str__(self) -> str:
        return "tuple(" + ", ".join(f"{f.type} {f.name}" for f in self.fields) + ")"


@dataclass(frozen=True, slots=True)
class ArrayType:
    item: FieldType

    def __str__(self) -> str:
        return f"{self.item}[]"


FieldType = Primitive | TupleType | ArrayType


@dataclass(frozen=True, slots=True)
class SchemaField:
    """One named, ordered declaration of a schema."""

    type: FieldType
    name: str = DEFAULT_FIELD_NAME
