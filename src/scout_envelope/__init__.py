"""
scout-envelope — message envelopes for scouting devices.

Schema-checked JSON envelopes exchanged between devices that may run
different app versions. Decoding never raises: bad input becomes a
``parseError`` envelope.
"""

from scout_envelope.errors import EnvelopeError, UnknownKindError, SchemaViolationError
from scout_envelope.ids import generate_message_id, utc_now
from scout_envelope.models.kinds import FieldSpec, MessageKind
from scout_envelope.models.envelope import MessageEnvelope
from scout_envelope.transport.envelope import DecodeResult, decode_envelope, encode_envelope, parse_envelope
from scout_envelope.validation import PayloadValue, validate, validate_payload

__version__ = "0.1.0"
__all__ = [
    "EnvelopeError",
    "UnknownKindError",
    "SchemaViolationError",
    "generate_message_id",
    "utc_now",
    "FieldSpec",
    "MessageKind",
    "MessageEnvelope",
    "DecodeResult",
    "decode_envelope",
    "encode_envelope",
    "parse_envelope",
    "PayloadValue",
    "validate",
    "validate_payload",
]
