"""
Envelope wire codec.

Encoding trusts the envelope it is given. Decoding never raises: every
failure comes back as a ``parseError`` envelope carrying the raw input and a
reason, so a bad message from a peer cannot take down the receiving loop.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Callable, Optional, Union

from pydantic import TypeAdapter, ValidationError

from scout_envelope.ids import generate_message_id, utc_now
from scout_envelope.models.envelope import MessageEnvelope
from scout_envelope.models.kinds import MessageKind

logger = logging.getLogger(__name__)

PARSER_ORIGIN = "parser"

_datetime_adapter = TypeAdapter(datetime)

# ISO-8601 text starts with a calendar date; bare numbers are not timestamps
_ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


class DecodeResult:
    """Outcome of decoding one wire message.

    ``envelope`` is always set. On failure it is the ``parseError`` envelope
    and ``error`` holds the same reason that is in its payload.
    """

    __slots__ = ("envelope", "error")

    def __init__(self, envelope: MessageEnvelope, error: Optional[str] = None):
        self.envelope = envelope
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.ok:
            return f"DecodeResult(ok, type={self.envelope.kind.value!r})"
        return f"DecodeResult(error={self.error!r})"


def encode_envelope(envelope: MessageEnvelope) -> str:
    return envelope.to_json()


def error_envelope(
    raw: str,
    reason: str,
    id_factory: Callable[[], str] = generate_message_id,
    clock: Callable[[], datetime] = utc_now,
) -> MessageEnvelope:
    return MessageEnvelope(
        kind=MessageKind.PARSE_ERROR,
        timestamp=clock(),
        message_id=id_factory(),
        responds_to=None,
        origin=PARSER_ORIGIN,
        destination="",
        payload={"raw": raw, "reason": reason},
    )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not _ISO_DATE_PREFIX.match(value):
        return None
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        return None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _text_field(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    return "" if value is None else _as_text(value)


def decode_envelope(
    raw: Union[str, bytes],
    *,
    id_factory: Optional[Callable[[], str]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> DecodeResult:
    """Decode wire text into an envelope, reporting why it failed if it did."""
    id_factory = id_factory or generate_message_id
    clock = clock or utc_now

    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            text = bytes(raw).decode("utf-8", errors="replace")
            return _fail(text, f"invalid JSON: not UTF-8 ({e.reason})", id_factory, clock)
    else:
        text = raw

    try:
        return _decode(text, id_factory, clock)
    except Exception as e:
        logger.exception("Unexpected failure while decoding envelope")
        return _fail(text, f"parse error: {e}", id_factory, clock)


def _fail(
    raw: str,
    reason: str,
    id_factory: Callable[[], str],
    clock: Callable[[], datetime],
) -> DecodeResult:
    logger.debug(f"Rejected envelope: {reason}")
    return DecodeResult(error_envelope(raw, reason, id_factory, clock), reason)


def _decode(raw: str, id_factory: Callable[[], str], clock: Callable[[], datetime]) -> DecodeResult:
    try:
        decoded = json.loads(raw, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        return _fail(raw, f"invalid JSON: {e.msg} at line {e.lineno} column {e.colno}", id_factory, clock)
    except ValueError as e:
        return _fail(raw, f"invalid JSON: {e}", id_factory, clock)
    if not isinstance(decoded, dict):
        return _fail(raw, "not a JSON object", id_factory, clock)

    type_token = decoded.get("type")
    if type_token is None:
        return _fail(raw, "missing message type", id_factory, clock)
    kind = MessageKind.lookup(type_token)
    if kind is None:
        return _fail(raw, f"unknown message type: {_as_text(type_token)}", id_factory, clock)

    raw_timestamp = decoded.get("timestamp")
    if raw_timestamp is None:
        timestamp = clock()
    else:
        timestamp = _parse_timestamp(raw_timestamp)
        if timestamp is None:
            return _fail(raw, f"invalid timestamp: {_as_text(raw_timestamp)}", id_factory, clock)

    message_id = decoded.get("message_id")
    responds_to = decoded.get("responds_to")
    payload = decoded.get("payload")

    candidate = MessageEnvelope(
        kind=kind,
        timestamp=timestamp,
        message_id=id_factory() if message_id is None else _as_text(message_id),
        responds_to=None if responds_to is None else _as_text(responds_to),
        origin=_text_field(decoded, "origin"),
        destination=_text_field(decoded, "destination"),
        payload=payload if isinstance(payload, dict) else {},
    )

    violations = candidate.validate_payload()
    if violations:
        return _fail(raw, f"schema validation failed: {', '.join(violations)}", id_factory, clock)
    return DecodeResult(candidate)


def parse_envelope(
    raw: Union[str, bytes],
    *,
    id_factory: Optional[Callable[[], str]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> MessageEnvelope:
    """Decode wire text. Never raises; failures come back as ``parseError`` envelopes."""
    return decode_envelope(raw, id_factory=id_factory, clock=clock).envelope
