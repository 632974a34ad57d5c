"""
scout-envelope error types.

Decoding never raises: these are only used by the APIs that explicitly ask
for a fault (``MessageKind.require``, ``MessageEnvelope.ensure_valid``).
"""

from typing import Any, Optional


class EnvelopeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class UnknownKindError(EnvelopeError):
    def __init__(self, token: str):
        super().__init__("unknown_kind", f"unknown message type: {token}", {"type": token})
        self.token = token


class SchemaViolationError(EnvelopeError):
    def __init__(self, kind: str, violations: list[str]):
        super().__init__(
            "schema_violation",
            f"{kind} payload failed validation: {', '.join(violations)}",
            {"type": kind, "violations": list(violations)},
        )
        self.violations = list(violations)
