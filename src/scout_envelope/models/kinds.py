"""
Message kinds and their payload schemas.

The set of kinds is closed: every kind is declared here with its schema and
nothing is registered at runtime.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from scout_envelope.errors import UnknownKindError


class FieldSpec(BaseModel):
    """Contract for one payload field.

    ``logical_type`` is one of string, int, double, bool, map or list. Any
    other token is accepted as a wildcard so newer peers can declare types
    older ones do not know about.
    """

    model_config = ConfigDict(frozen=True)

    logical_type: str
    optional: bool = False
    nullable: bool = False


class MessageKind(str, Enum):
    PARSE_ERROR = "parseError"  # decode failure sentinel
    REQUEST = "request"  # either side asking the other for something
    SCOUT_DATA = "scoutData"  # a scout's saved form
    STATUS = "status"  # heartbeat

    @property
    def payload_schema(self) -> Mapping[str, FieldSpec]:
        return _SCHEMAS[self]

    @classmethod
    def lookup(cls, token: Any) -> Optional["MessageKind"]:
        """Resolve a wire ``type`` token. Exact, case-sensitive; None if unknown."""
        if not isinstance(token, str):
            return None
        return _BY_NAME.get(token)

    @classmethod
    def require(cls, token: Any) -> "MessageKind":
        kind = cls.lookup(token)
        if kind is None:
            raise UnknownKindError(str(token))
        return kind


_SCHEMAS: Mapping[MessageKind, Mapping[str, FieldSpec]] = MappingProxyType({
    MessageKind.PARSE_ERROR: MappingProxyType({
        "raw": FieldSpec(logical_type="string"),  # input that failed to parse
        "reason": FieldSpec(logical_type="string"),
    }),
    MessageKind.REQUEST: MappingProxyType({
        # requested action; other keys are free-form request arguments
        "message_type": FieldSpec(logical_type="string"),
    }),
    MessageKind.SCOUT_DATA: MappingProxyType({
        "submitted_timestamp": FieldSpec(logical_type="string"),  # when the scout saved it, UTC
        "scout_id": FieldSpec(logical_type="string"),
        "data": FieldSpec(logical_type="map"),
    }),
    MessageKind.STATUS: MappingProxyType({
        "battery_level": FieldSpec(logical_type="int"),  # 0-100, not enforced
    }),
})

_BY_NAME: Mapping[str, MessageKind] = MappingProxyType({k.value: k for k in MessageKind})
