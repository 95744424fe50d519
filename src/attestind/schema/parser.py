"""Recursive-descent parser for attestation schema signatures.

A schema signature is a comma-separated list of ``<type> [<name>]``
declarations, e.g. ``"uint256 eventId, tuple(address to, uint8 kind)[] legs, bool"``.

Splitting rules
---------------
- Commas nested inside ``tuple(...)`` never separate top-level fields.
- Type and name are split at the last whitespace outside parentheses, so a
  bare ``tuple(uint8 a, uint8 b)`` keeps its inner spaces and gets the
  default name ``"field"``.
- A trailing empty field (``"uint8 a,"``) is ignored; an empty field anywhere
  else is an error.
- Tuple and array levels together may nest at most `MAX_NESTING_DEPTH` deep.
  Deeper schemas raise `SchemaError`.
"""

from __future__ import annotations

import logging
import re

from attestind.core.errors import SchemaError
from attestind.schema.types import DEFAULT_FIELD_NAME, ArrayType, FieldType, Primitive, SchemaField, TupleType

logger = logging.getLogger(__name__)

_SIMPLE_TYPES: dict[str, Primitive] = {
    "bool": Primitive("bool"),
    "string": Primitive("string"),
    "address": Primitive("address"),
    "bytes": Primitive("bytes"),
}

_INTEGER_RE = re.compile(r"(u?int)(\d+)")
_FIXED_BYTES_RE = re.compile(r"bytes(\d+)")

_TUPLE_PREFIX = "tuple("

MAX_NESTING_DEPTH = 12


def parse_schema(schema: str) -> list[SchemaField]:
    """Parse a schema signature into its ordered list of fields.

    :raise SchemaError:
        On unknown type tokens, invalid widths, unbalanced parentheses or
        nesting deeper than `MAX_NESTING_DEPTH`.
        The error carries the offending token and its offset in `schema`.
    """
    fields = _parse_field_list(schema, 0, 0)
    logger.debug("Parsed schema %r into %d fields", schema, len(fields))
    return fields


def split_fields(text: str, offset: int = 0) -> list[tuple[str, int]]:
    """Split `text` at top-level commas.

    Returns (segment, absolute offset) pairs; segments are not trimmed.
    """
    parts: list[tuple[str, int]] = []
    opened: list[int] = []
    start = 0
    for i, ch in enumerate(text):
        if ch == "(":
            opened.append(i)
        elif ch == ")":
            if not opened:
                raise SchemaError("Unbalanced parentheses", token=ch, position=offset + i)
            opened.pop()
        elif ch == "," and not opened:
            parts.append((text[start:i], offset + start))
            start = i + 1
    if opened:
        raise SchemaError("Unbalanced parentheses", token=text[opened[-1] :], position=offset + opened[-1])
    parts.append((text[start:], offset + start))
    return parts


def _parse_field_list(text: str, offset: int, depth: int) -> list[SchemaField]:
    parts = split_fields(text, offset)
    fields: list[SchemaField] = []
    for idx, (segment, seg_offset) in enumerate(parts):
        stripped = segment.strip()
        if not stripped:
            if idx == len(parts) - 1:
                continue
            raise SchemaError("Empty field", token=segment, position=seg_offset)
        lead = len(segment) - len(segment.lstrip())
        fields.append(_parse_field(stripped, seg_offset + lead, depth))
    return fields


def _parse_field(text: str, offset: int, depth: int) -> SchemaField:
    """Parse one trimmed ``<type> [<name>]`` declaration."""
    parens = 0
    split_at = -1
    for i in range(len(text) - 1, -1, -1):
        ch = text[i]
        if ch == ")":
            parens += 1
        elif ch == "(":
            parens -= 1
        elif ch.isspace() and parens == 0:
            split_at = i
            break

    if split_at > 0:
        type_text = text[:split_at].rstrip()
        name = text[split_at:].strip()
    else:
        type_text, name = text, DEFAULT_FIELD_NAME

    return SchemaField(parse_type(type_text, offset, depth), name)


def _closing_paren(text: str, open_idx: int) -> int:
    depth = 0
    for i in range(open_idx, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def parse_type(text: str, offset: int = 0, depth: int = 0) -> FieldType:
    """Parse a single type token (``uint8``, ``bytes32[]``, ``tuple(...)``...).

    `depth` is the number of enclosing tuple and array levels.
    """
    is_tuple = text.startswith(_TUPLE_PREFIX) and _closing_paren(text, len(_TUPLE_PREFIX) - 1) == len(text) - 1
    if (is_tuple or text.endswith("[]")) and depth >= MAX_NESTING_DEPTH:
        raise SchemaError(f"Nesting deeper than {MAX_NESTING_DEPTH} levels", token=text, position=offset)

    if is_tuple:
        inner_offset = offset + len(_TUPLE_PREFIX)
        return TupleType(tuple(_parse_field_list(text[len(_TUPLE_PREFIX) : -1], inner_offset, depth + 1)))

    if text.endswith("[]"):
        return ArrayType(parse_type(text[:-2].rstrip(), offset, depth + 1))

    return _parse_primitive(text, offset)


def _parse_primitive(text: str, offset: int) -> Primitive:
    simple = _SIMPLE_TYPES.get(text)
    if simple is not None:
        return simple

    m = _INTEGER_RE.fullmatch(text)
    if m:
        kind, bits = m.group(1), int(m.group(2))
        if bits % 8 != 0 or not 8 <= bits <= 256:
            raise SchemaError(f"Invalid {kind} size", token=text, position=offset)
        return Primitive(kind, bits)

    m = _FIXED_BYTES_RE.fullmatch(text)
    if m:
        size = int(m.group(1))
        if not 1 <= size <= 32:
            raise SchemaError("Invalid bytes size", token=text, position=offset)
        return Primitive("fixed_bytes", size)

    raise SchemaError("Unsupported type", token=text, position=offset)
