"""Core data models.

This module defines:
- `EventLog`: minimal RPC log record used by the event extractor.
- `Meta`: positional metadata (tx, log index, block) shared by every record.
- `AttestedStub`: lightweight reference to an `Attested` log, enough to fetch
  the full attestation later.
- `AttestationRecord` / `SchemaRecord`: results of the two read-only calls.
- Output records (`AttestedEvent`, `RevokedEvent`, `RevokedOffchainEvent`,
  `TimestampedEvent`) grouped per block in `BlockEvents`.

Design notes
------------
- Addresses and 32-byte ids are lowercase 0x-hex strings.
- Raw payloads stay `bytes` until serialization.
- Output records are frozen; `to_json_line` emits one compact JSON line.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar

# === RPC record ===


@dataclass(slots=True, frozen=True)
class EventLog:
    """Raw log as fetched from RPC, minimally normalized."""

    address: str  # lowercased 0x...
    topics: tuple[str, ...]  # lowercased 0x...
    data_hex: str  # "0x..."
    block_number: int
    tx_hash: str  # lowercased 0x...
    log_index: int
    block_timestamp: int | None = None

    def data_bytes(self) -> bytes:
        data_hex = self.data_hex[2:] if self.data_hex.lower().startswith("0x") else self.data_hex
        return bytes.fromhex(data_hex) if data_hex else b""


@dataclass(slots=True, frozen=True)
class Meta:
    """Where an event was emitted."""

    block_number: int
    block_timestamp: int | None
    tx_hash: str
    log_index: int

    @staticmethod
    def from_log(log: EventLog) -> Meta:
        return Meta(
            block_number=log.block_number,
            block_timestamp=log.block_timestamp,
            tx_hash=log.tx_hash,
            log_index=log.log_index,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "evt_tx_hash": self.tx_hash,
            "evt_index": self.log_index,
            "evt_block_time": self.block_timestamp,
            "evt_block_number": self.block_number,
        }


# === Read-only call results ===


@dataclass(slots=True, frozen=True)
class AttestationRecord:
    """`EAS.getAttestation(uid)` result."""

    uid: str
    schema_id: str
    time: int
    expiration_time: int
    revocation_time: int
    ref_uid: str
    recipient: str
    attester: str
    revocable: bool
    data: bytes


@dataclass(slots=True, frozen=True)
class SchemaRecord:
    """`SchemaRegistry.getSchema(uid)` result."""

    uid: str
    resolver: str
    revocable: bool
    schema: str


# === Event stubs ===


@dataclass(slots=True, frozen=True)
class AttestedStub:
    """An `Attested` log decoded from its topics; the attestation body is fetched later."""

    meta: Meta
    attester: str
    recipient: str
    schema_id: str
    uid: str


# === Output records ===


@dataclass(slots=True, frozen=True)
class _EventRecord:
    kind: ClassVar[str] = ""
    meta: Meta

    def _fields(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.kind, **self.meta.to_dict(), **self._fields()}

    def to_json_line(self) -> str:
        """Serialize as a compact JSON line."""
        return json.dumps(self.to_dict(), separators=(",", ":")) + "\n"


@dataclass(slots=True, frozen=True)
class AttestedEvent(_EventRecord):
    kind: ClassVar[str] = "Attested"
    attester: str
    recipient: str
    schema_id: str
    uid: str
    data: bytes
    schema: str
    decoded_data: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {
            "attester": self.attester,
            "recipient": self.recipient,
            "schema_id": self.schema_id,
            "uid": self.uid,
            "data": "0x" + self.data.hex(),
            "schema": self.schema,
            "decoded_data": self.decoded_data,
        }


@dataclass(slots=True, frozen=True)
class RevokedEvent(_EventRecord):
    kind: ClassVar[str] = "Revoked"
    attester: str
    recipient: str
    schema_id: str
    uid: str

    def _fields(self) -> dict[str, Any]:
        return {
            "attester": self.attester,
            "recipient": self.recipient,
            "schema_id": self.schema_id,
            "uid": self.uid,
        }


@dataclass(slots=True, frozen=True)
class RevokedOffchainEvent(_EventRecord):
    kind: ClassVar[str] = "RevokedOffchain"
    revoker: str
    data: str  # bytes32, 0x-hex
    timestamp: int

    def _fields(self) -> dict[str, Any]:
        return {"revoker": self.revoker, "data": self.data, "timestamp": self.timestamp}


@dataclass(slots=True, frozen=True)
class TimestampedEvent(_EventRecord):
    kind: ClassVar[str] = "Timestamped"
    data: str  # bytes32, 0x-hex
    timestamp: int

    def _fields(self) -> dict[str, Any]:
        return {"data": self.data, "timestamp": self.timestamp}


EventRecord = AttestedEvent | RevokedEvent | RevokedOffchainEvent | TimestampedEvent


@dataclass(slots=True)
class BlockEvents:
    """All EAS events of one block, each list in log order."""

    block_number: int
    attested: list[AttestedStub] = field(default_factory=list)
    revoked: list[RevokedEvent] = field(default_factory=list)
    revoked_offchain: list[RevokedOffchainEvent] = field(default_factory=list)
    timestamped: list[TimestampedEvent] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.attested or self.revoked or self.revoked_offchain or self.timestamped)
