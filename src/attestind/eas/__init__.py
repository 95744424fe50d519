"""EAS contract surface: read-only functions and event topics."""

from attestind.eas.events import (
    ATTESTED_T0,
    EAS_TOPIC0S,
    REVOKED_OFFCHAIN_T0,
    REVOKED_T0,
    TIMESTAMPED_T0,
    extract_block_events,
)
from attestind.eas.functions import GET_ATTESTATION, GET_SCHEMA, ContractFunction, parse_attestation, parse_schema_record

__all__ = [
    "ATTESTED_T0",
    "EAS_TOPIC0S",
    "REVOKED_OFFCHAIN_T0",
    "REVOKED_T0",
    "TIMESTAMPED_T0",
    "extract_block_events",
    "GET_ATTESTATION",
    "GET_SCHEMA",
    "ContractFunction",
    "parse_attestation",
    "parse_schema_record",
]
