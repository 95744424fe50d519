"""Core data models, configurations, errors and interfaces.

This package provides:
- Data models (EventLog, Meta, AttestedStub, output event records)
- Configuration classes (EnrichConfig, IndexerConfig)
- Error taxonomy (SchemaError, DecodeError, ExternalCallError, JoinInvariantViolation)
"""

from attestind.core.config import EnrichConfig, IndexerConfig
from attestind.core.errors import DecodeError, ExternalCallError, JoinInvariantViolation, SchemaError
from attestind.core.models import (
    AttestationRecord,
    AttestedEvent,
    AttestedStub,
    BlockEvents,
    EventLog,
    Meta,
    RevokedEvent,
    RevokedOffchainEvent,
    SchemaRecord,
    TimestampedEvent,
)

__all__ = [
    "EnrichConfig",
    "IndexerConfig",
    "DecodeError",
    "ExternalCallError",
    "JoinInvariantViolation",
    "SchemaError",
    "AttestationRecord",
    "AttestedEvent",
    "AttestedStub",
    "BlockEvents",
    "EventLog",
    "Meta",
    "RevokedEvent",
    "RevokedOffchainEvent",
    "SchemaRecord",
    "TimestampedEvent",
]
