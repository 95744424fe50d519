"""Read-only EAS contract functions used by the enrichment pipeline.

Only two calls are needed:

- ``EAS.getAttestation(bytes32 uid)``
- ``SchemaRegistry.getSchema(bytes32 uid)``

Both return a single struct, decoded here into `AttestationRecord` / `SchemaRecord`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_canonical_address

from attestind.core.errors import ExternalCallError
from attestind.core.models import AttestationRecord, SchemaRecord


@dataclass(frozen=True)
class ContractFunction:
    """ABI description of one contract function."""

    name: str
    input_types: tuple[str, ...]
    output_types: tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_input(self, args: Sequence[Any]) -> bytes:
        """Return calldata: 4-byte selector followed by the ABI-encoded arguments."""
        return self.selector + encode(list(self.input_types), list(args))

    def decode_output(self, data: bytes) -> tuple[Any, ...]:
        return decode(list(self.output_types), data)


GET_ATTESTATION = ContractFunction(
    name="getAttestation",
    input_types=("bytes32",),
    output_types=("(bytes32,bytes32,uint64,uint64,uint64,bytes32,address,address,bool,bytes)",),
)

GET_SCHEMA = ContractFunction(
    name="getSchema",
    input_types=("bytes32",),
    output_types=("(bytes32,address,bool,string)",),
)


def uid_to_bytes(uid: str) -> bytes:
    """Convert a 0x-hex bytes32 id into its raw 32 bytes."""
    raw = bytes.fromhex(uid[2:] if uid.lower().startswith("0x") else uid)
    if len(raw) != 32:
        raise ValueError(f"Expected a 32-byte id, got {len(raw)} bytes: {uid}")
    return raw


def _hex(value: Any) -> str:
    return "0x" + bytes(value).hex()


def _address(value: Any) -> str:
    return _hex(to_canonical_address(value))


def _unwrap_struct(function: ContractFunction, target: str, result: Sequence[Any], width: int) -> Sequence[Any]:
    """Return the single struct of a call result, checking its arity."""
    struct = result[0] if len(result) == 1 else result
    if not isinstance(struct, (tuple, list)) or len(struct) != width:
        raise ExternalCallError(function.name, target, f"unexpected result shape: {result!r}")
    return struct


def parse_attestation(result: Sequence[Any], *, target: str = "") -> AttestationRecord:
    """Build an `AttestationRecord` from a decoded ``getAttestation`` result.

    :raise ExternalCallError:
        If the result does not look like an attestation struct.
    """
    s = _unwrap_struct(GET_ATTESTATION, target, result, 10)
    try:
        return AttestationRecord(
            uid=_hex(s[0]),
            schema_id=_hex(s[1]),
            time=int(s[2]),
            expiration_time=int(s[3]),
            revocation_time=int(s[4]),
            ref_uid=_hex(s[5]),
            recipient=_address(s[6]),
            attester=_address(s[7]),
            revocable=bool(s[8]),
            data=bytes(s[9]),
        )
    except (TypeError, ValueError) as e:
        raise ExternalCallError(GET_ATTESTATION.name, target, f"malformed attestation: {e}") from e


def parse_schema_record(result: Sequence[Any], *, target: str = "") -> SchemaRecord:
    """Build a `SchemaRecord` from a decoded ``getSchema`` result.

    :raise ExternalCallError:
        If the result does not look like a schema record.
    """
    s = _unwrap_struct(GET_SCHEMA, target, result, 4)
    if not isinstance(s[3], str):
        raise ExternalCallError(GET_SCHEMA.name, target, f"schema text is not a string: {s[3]!r}")
    try:
        return SchemaRecord(
            uid=_hex(s[0]),
            resolver=_address(s[1]),
            revocable=bool(s[2]),
            schema=s[3],
        )
    except (TypeError, ValueError) as e:
        raise ExternalCallError(GET_SCHEMA.name, target, f"malformed schema record: {e}") from e
