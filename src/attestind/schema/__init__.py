"""Schema-driven ABI codec.

This package provides:
- Schema signature parser (field type tree)
- Resolver onto `eth_abi` parameter types
- Decoder and JSON projector
- `decode_data` facade chaining all of the above
"""

from attestind.schema.codec import decode_data, decode_data_or_error, error_marker, try_decode_data
from attestind.schema.decoder import decode_values
from attestind.schema.parser import MAX_NESTING_DEPTH, parse_schema, parse_type
from attestind.schema.projector import project
from attestind.schema.resolver import resolve_fields, resolve_type, to_type_str
from attestind.schema.types import ArrayType, FieldType, Primitive, SchemaField, TupleType

__all__ = [
    "decode_data",
    "decode_data_or_error",
    "error_marker",
    "try_decode_data",
    "decode_values",
    "MAX_NESTING_DEPTH",
    "parse_schema",
    "parse_type",
    "project",
    "resolve_fields",
    "resolve_type",
    "to_type_str",
    "ArrayType",
    "FieldType",
    "Primitive",
    "SchemaField",
    "TupleType",
]
