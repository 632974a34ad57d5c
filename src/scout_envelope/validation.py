"""
Payload validation against a kind's schema.

Validation reports, it never raises: the result is a list of human-readable
violations, empty when the payload is valid.
"""

from typing import Any, Mapping, Union

from scout_envelope.models.kinds import FieldSpec, MessageKind

PayloadValue = Union[str, int, float, bool, None, dict[str, "PayloadValue"], list["PayloadValue"]]

_ALIASES = {
    "boolean": "bool",
    "map<string, dynamic>": "map",
    "list<dynamic>": "list",
}


def shape_of(value: Any) -> str:
    """Logical shape name of a payload value, as used in violation messages."""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "double"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "map"
    if isinstance(value, (list, tuple)):
        return "list"
    if value is None:
        return "null"
    return type(value).__name__


def matches_type(value: Any, logical_type: str) -> bool:
    token = logical_type.lower()
    token = _ALIASES.get(token, token)
    shape = shape_of(value)
    if token == "double":
        # int widens to double, never the other way
        return shape in ("double", "int")
    if token in ("string", "int", "bool", "map", "list"):
        return shape == token
    return True


def validate_payload(
    schema: Mapping[str, FieldSpec],
    payload: Mapping[str, Any],
    strict: bool = False,
) -> list[str]:
    errors: list[str] = []

    for key, spec in schema.items():
        if key not in payload:
            if not spec.optional:
                errors.append(f'missing key "{key}"')
            continue

        value = payload[key]
        if value is None:
            if not spec.nullable:
                errors.append(f'key "{key}" may not be null')
            continue

        if not matches_type(value, spec.logical_type):
            errors.append(f'key "{key}" expected {spec.logical_type} got {shape_of(value)}')

    if strict:
        for key in payload:
            if key not in schema:
                errors.append(f'unexpected key "{key}"')

    return errors


def validate(kind: MessageKind, payload: Mapping[str, Any], strict: bool = False) -> list[str]:
    """Check ``payload`` against ``kind``'s schema. Extra keys only count when ``strict``."""
    return validate_payload(kind.payload_schema, payload, strict=strict)
