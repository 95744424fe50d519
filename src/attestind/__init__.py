from __future__ import annotations

from .core.errors import DecodeError, ExternalCallError, JoinInvariantViolation, SchemaError
from .core.models import AttestedEvent, AttestedStub
from .core.use_cases.enrich import AttestationEnricher
from .schema.codec import decode_data, decode_data_or_error
from .schema.parser import parse_schema
from .schema.projector import project
from .schema.resolver import resolve_fields

__all__ = [
    "decode_data",
    "decode_data_or_error",
    "parse_schema",
    "resolve_fields",
    "project",
    "AttestationEnricher",
    "AttestedEvent",
    "AttestedStub",
    "DecodeError",
    "ExternalCallError",
    "JoinInvariantViolation",
    "SchemaError",
]
