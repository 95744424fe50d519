"""Error taxonomy for schema decoding and attestation enrichment.

- `SchemaError` / `DecodeError`: recoverable per record, surfaced as an
  error marker in place of the decoded projection.
- `ExternalCallError` / `JoinInvariantViolation`: abort the enclosing block.
"""

from __future__ import annotations


class SchemaError(ValueError):
    """Malformed schema text (unknown type token, bad width, unbalanced parentheses)."""

    def __init__(self, message: str, *, token: str, position: int) -> None:
        super().__init__(f"{message}: {token!r} at position {position}")
        self.token = token
        self.position = position


class DecodeError(ValueError):
    """Payload does not match the types resolved from its schema."""

    def __init__(self, schema: str, reason: str) -> None:
        super().__init__(f"Failed to decode data with schema {schema!r}: {reason}")
        self.schema = schema
        self.reason = reason


class ExternalCallError(RuntimeError):
    """A read-only contract call failed or returned malformed data."""

    def __init__(self, function: str, target: str, reason: str) -> None:
        super().__init__(f"{function} call to {target} failed: {reason}")
        self.function = function
        self.target = target
        self.reason = reason


class JoinInvariantViolation(RuntimeError):
    """A fetched attestation references a schema id missing from the schema map."""
