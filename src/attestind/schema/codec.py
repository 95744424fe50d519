"""Schema-driven codec: schema text + payload → JSON projection."""

from __future__ import annotations

import logging
from typing import Any

from attestind.core.errors import DecodeError, SchemaError
from attestind.schema.decoder import decode_values
from attestind.schema.parser import parse_schema
from attestind.schema.projector import project
from attestind.schema.resolver import resolve_fields

logger = logging.getLogger(__name__)

ERROR_KEY = "error"


def decode_data(data: bytes, schema: str) -> dict[str, Any]:
    """Decode ABI-encoded attestation data into a JSON object using its schema signature.

    :raise SchemaError: malformed schema text
    :raise TypeError: a field width the ABI codec cannot handle
    :raise DecodeError: payload does not match the schema
    """
    fields = parse_schema(schema)
    types = resolve_fields(fields)
    values = decode_values(data, types, schema=schema)
    return project(fields, values)


def error_marker(reason: str) -> dict[str, Any]:
    return {ERROR_KEY: reason}


def try_decode_data(data: bytes, schema: str) -> tuple[dict[str, Any], bool]:
    """Like `decode_data`, but degrade to ``{"error": reason}`` instead of raising.

    Returns the projection (or the error marker) and whether decoding succeeded.
    """
    try:
        return decode_data(data, schema), True
    except (SchemaError, TypeError, DecodeError) as e:
        logger.warning("Could not decode %d bytes with schema %r: %s", len(data), schema, e)
        return error_marker(str(e)), False


def decode_data_or_error(data: bytes, schema: str) -> dict[str, Any]:
    decoded, _ = try_decode_data(data, schema)
    return decoded
