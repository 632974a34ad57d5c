"""
Message envelope passed between devices.
"""

import json
import math
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scout_envelope.errors import SchemaViolationError
from scout_envelope.ids import generate_message_id, utc_now
from scout_envelope.models.kinds import MessageKind
from scout_envelope.validation import validate


def to_utc(value: datetime) -> datetime:
    """Normalize to UTC. Naive datetimes are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return to_utc(value).isoformat(timespec="microseconds").replace("+00:00", "Z")


def freeze(value: Any) -> Any:
    """Read-only copy of a payload value: maps become mapping proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Plain JSON-ready copy of a frozen payload value. Non-finite floats become text."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


class MessageEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    timestamp: datetime = Field(default_factory=utc_now)
    message_id: str = Field(default_factory=generate_message_id)
    responds_to: Optional[str] = None  # message_id of the message this answers
    origin: str = ""  # sender device id
    destination: str = ""  # recipient device id, "" = broadcast
    payload: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, v: datetime) -> datetime:
        return to_utc(v)

    @field_validator("payload")
    @classmethod
    def _freeze_payload(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze(v)

    @classmethod
    def request(
        cls,
        message_type: str,
        origin: str,
        destination: str,
        *,
        extra: Optional[dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
        responds_to: Optional[str] = None,
    ) -> "MessageEnvelope":
        """Ask the peer for ``message_type``; ``extra`` rides along in the payload."""
        return cls(
            kind=MessageKind.REQUEST,
            timestamp=timestamp or utc_now(),
            responds_to=responds_to,
            origin=origin,
            destination=destination,
            payload={"message_type": message_type, **(extra or {})},
        )

    @classmethod
    def scout_data(
        cls,
        submitted_timestamp: str,
        scout_id: str,
        origin: str,
        destination: str,
        data: dict[str, Any],
        *,
        timestamp: Optional[datetime] = None,
    ) -> "MessageEnvelope":
        return cls(
            kind=MessageKind.SCOUT_DATA,
            timestamp=timestamp or utc_now(),
            origin=origin,
            destination=destination,
            payload={
                "submitted_timestamp": submitted_timestamp,
                "scout_id": scout_id,
                "data": data,
            },
        )

    @classmethod
    def status(
        cls,
        battery_level: int,
        origin: str,
        destination: str,
        *,
        timestamp: Optional[datetime] = None,
    ) -> "MessageEnvelope":
        return cls(
            kind=MessageKind.STATUS,
            timestamp=timestamp or utc_now(),
            origin=origin,
            destination=destination,
            payload={"battery_level": battery_level},
        )

    def reply(self, kind: MessageKind, payload: Mapping[str, Any], origin: str) -> "MessageEnvelope":
        """Build a response addressed back to this message's sender."""
        return MessageEnvelope(
            kind=kind,
            responds_to=self.message_id,
            origin=origin,
            destination=self.origin,
            payload=payload,
        )

    @property
    def requested_type(self) -> Optional[str]:
        value = self.payload.get("message_type")
        return value if isinstance(value, str) else None

    @property
    def is_broadcast(self) -> bool:
        return self.destination == ""

    @property
    def is_parse_error(self) -> bool:
        return self.kind is MessageKind.PARSE_ERROR

    def validate_payload(self, strict: bool = False) -> list[str]:
        """Check the payload against this kind's schema. Empty list if valid."""
        return validate(self.kind, self.payload, strict=strict)

    def ensure_valid(self, strict: bool = False) -> "MessageEnvelope":
        violations = self.validate_payload(strict=strict)
        if violations:
            raise SchemaViolationError(self.kind.value, violations)
        return self

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.kind.value,
            "timestamp": format_timestamp(self.timestamp),
            "message_id": self.message_id,
        }
        if self.responds_to is not None:
            data["responds_to"] = self.responds_to
        data["origin"] = self.origin
        data["destination"] = self.destination
        data["payload"] = thaw(self.payload)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, allow_nan=False)

    def __str__(self) -> str:
        responds = f" responds_to={self.responds_to}" if self.responds_to is not None else ""
        return (
            f"Envelope(type={self.kind.value} time={format_timestamp(self.timestamp)} "
            f"id={self.message_id}{responds} payload={thaw(self.payload)})"
        )
