"""Thin wrapper over `eth_abi.decode` producing a normalized value tree."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_abi.grammar import ABIType, BasicType
from eth_abi.grammar import TupleType as AbiTupleType
from eth_utils import to_canonical_address

from attestind.core.errors import DecodeError
from attestind.schema.resolver import to_type_strs

# DecodedValue leaves: bool | int | bytes | str; tuple slots -> tuple, array elements -> list
DecodedValue = Any


def decode_values(payload: bytes, types: Sequence[ABIType], *, schema: str = "") -> list[DecodedValue]:
    """Decode `payload` against the resolved parameter types.

    `eth_abi` returns tuples for both ABI tuples and arrays; the result is
    normalized so that arrays become lists and addresses become 20 raw bytes.

    :raise DecodeError:
        If the payload is truncated, carries an invalid offset, or otherwise
        does not match `types`.
    """
    try:
        raw = decode(to_type_strs(types), bytes(payload))
    except (DecodingError, ValueError, OverflowError) as e:
        raise DecodeError(schema, f"{type(e).__name__}: {e}") from e
    return [_normalize(t, v) for t, v in zip(types, raw)]


def _normalize(abi_type: ABIType, value: Any) -> DecodedValue:
    if abi_type.is_array:
        return [_normalize(abi_type.item_type, v) for v in value]
    if isinstance(abi_type, AbiTupleType):
        return tuple(_normalize(c, v) for c, v in zip(abi_type.components, value))
    if isinstance(abi_type, BasicType) and abi_type.base == "address":
        return to_canonical_address(value)
    return value
