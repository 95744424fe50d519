"""EAS log extraction: raw `EventLog`s → per-block event stubs and records.

Tracked events (all fields indexed except `Attested.uid` / `Revoked.uid`)::

    Attested(address indexed recipient, address indexed attester, bytes32 uid, bytes32 indexed schemaUID)
    Revoked(address indexed recipient, address indexed attester, bytes32 uid, bytes32 indexed schemaUID)
    RevokedOffchain(address indexed revoker, bytes32 indexed data, uint64 indexed timestamp)
    Timestamped(bytes32 indexed data, uint64 indexed timestamp)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from eth_utils.abi import event_signature_to_log_topic

from attestind.core.models import (
    AttestedStub,
    BlockEvents,
    EventLog,
    Meta,
    RevokedEvent,
    RevokedOffchainEvent,
    TimestampedEvent,
)

logger = logging.getLogger(__name__)


def get_event_topic0(signature: str) -> str:
    return "0x" + event_signature_to_log_topic(signature).hex()


ATTESTED_T0 = get_event_topic0("Attested(address,address,bytes32,bytes32)")
REVOKED_T0 = get_event_topic0("Revoked(address,address,bytes32,bytes32)")
REVOKED_OFFCHAIN_T0 = get_event_topic0("RevokedOffchain(address,bytes32,uint64)")
TIMESTAMPED_T0 = get_event_topic0("Timestamped(bytes32,uint64)")

EAS_TOPIC0S: list[str] = [ATTESTED_T0, REVOKED_T0, REVOKED_OFFCHAIN_T0, TIMESTAMPED_T0]

# topic0 -> number of topics the log must carry
_TOPIC_COUNTS: dict[str, int] = {
    ATTESTED_T0: 4,
    REVOKED_T0: 4,
    REVOKED_OFFCHAIN_T0: 4,
    TIMESTAMPED_T0: 3,
}


def topic_to_address(topic_hex: str) -> str:
    """Return the 0x-address held in the low 20 bytes of a topic."""
    return "0x" + topic_hex.lower()[-40:]


def topic_to_int(topic_hex: str) -> int:
    return int(topic_hex, 16)


def data_word_hex(log: EventLog, i: int) -> str | None:
    """Return the i-th 32-byte data word as 0x-hex, or None if the data is too short."""
    data = log.data_bytes()
    word = data[32 * i : 32 * (i + 1)]
    if len(word) != 32:
        return None
    return "0x" + word.hex()


def _attested_stub(log: EventLog, meta: Meta) -> AttestedStub | None:
    uid = data_word_hex(log, 0)
    if uid is None:
        return None
    return AttestedStub(
        meta=meta,
        recipient=topic_to_address(log.topics[1]),
        attester=topic_to_address(log.topics[2]),
        schema_id=log.topics[3].lower(),
        uid=uid,
    )


def _revoked(log: EventLog, meta: Meta) -> RevokedEvent | None:
    uid = data_word_hex(log, 0)
    if uid is None:
        return None
    return RevokedEvent(
        meta=meta,
        recipient=topic_to_address(log.topics[1]),
        attester=topic_to_address(log.topics[2]),
        schema_id=log.topics[3].lower(),
        uid=uid,
    )


def extract_block_events(
    logs: Iterable[EventLog],
    *,
    eas_address: str,
    block_number: int,
) -> BlockEvents:
    """Match the EAS logs of one block and decode their fixed-layout fields.

    Logs from other emitters, with an unknown topic0, or with too few
    topics / data words are skipped.
    """
    out = BlockEvents(block_number=block_number)
    eas_address = eas_address.lower()
    skipped = 0

    for log in sorted(logs, key=lambda lg: lg.log_index):
        if log.address.lower() != eas_address or not log.topics:
            skipped += 1
            continue
        topic0 = log.topics[0].lower()
        need = _TOPIC_COUNTS.get(topic0)
        if need is None or len(log.topics) < need:
            skipped += 1
            continue

        meta = Meta.from_log(log)
        if topic0 == ATTESTED_T0:
            stub = _attested_stub(log, meta)
            if stub is None:
                skipped += 1
                continue
            out.attested.append(stub)
        elif topic0 == REVOKED_T0:
            rec = _revoked(log, meta)
            if rec is None:
                skipped += 1
                continue
            out.revoked.append(rec)
        elif topic0 == REVOKED_OFFCHAIN_T0:
            out.revoked_offchain.append(
                RevokedOffchainEvent(
                    meta=meta,
                    revoker=topic_to_address(log.topics[1]),
                    data=log.topics[2].lower(),
                    timestamp=topic_to_int(log.topics[3]),
                )
            )
        else:
            out.timestamped.append(
                TimestampedEvent(
                    meta=meta,
                    data=log.topics[1].lower(),
                    timestamp=topic_to_int(log.topics[2]),
                )
            )

    if skipped:
        logger.debug("Block %d: skipped %d non-matching logs", block_number, skipped)
    return out
