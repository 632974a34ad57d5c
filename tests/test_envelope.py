"""MessageEnvelope construction and helpers."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from scout_envelope import MessageEnvelope, MessageKind, SchemaViolationError


FIXED = datetime(2024, 3, 9, 14, 30, 0, 123456, tzinfo=timezone.utc)


def test_defaults():
    env = MessageEnvelope(kind=MessageKind.STATUS, payload={"battery_level": 50})
    assert env.message_id
    assert env.timestamp.tzinfo is not None
    assert env.origin == ""
    assert env.destination == ""
    assert env.responds_to is None
    assert env.is_broadcast


def test_fresh_ids_per_envelope():
    a = MessageEnvelope.status(10, "dev-a", "")
    b = MessageEnvelope.status(10, "dev-a", "")
    assert a.message_id != b.message_id


def test_kind_from_wire_name():
    env = MessageEnvelope(kind="scoutData", payload={})
    assert env.kind is MessageKind.SCOUT_DATA


def test_envelope_is_frozen():
    env = MessageEnvelope.status(50, "dev-a", "dev-b")
    with pytest.raises(ValidationError):
        env.message_id = "other"


class TestPayloadImmutability:
    def test_top_level_assignment_rejected(self):
        env = MessageEnvelope.status(50, "a", "")
        with pytest.raises(TypeError):
            env.payload["battery_level"] = "full"
        assert env.validate_payload() == []

    def test_nested_values_are_read_only(self):
        env = MessageEnvelope.scout_data("t", "s", "a", "", {"auto": {"notes": [1, 2]}})
        with pytest.raises(TypeError):
            env.payload["data"]["auto"]["extra"] = 1
        assert env.payload["data"]["auto"]["notes"] == (1, 2)
        with pytest.raises(AttributeError):
            env.payload["data"]["auto"]["notes"].append(3)

    def test_caller_dict_is_copied(self):
        data = {"team": 254}
        env = MessageEnvelope.scout_data("t", "s", "a", "", data)
        data["team"] = 1
        data["extra"] = True
        assert env.payload["data"] == {"team": 254}

    def test_to_dict_returns_plain_containers(self):
        env = MessageEnvelope.scout_data("t", "s", "a", "", {"notes": [1, {"x": 2}]})
        payload = env.to_dict()["payload"]
        assert type(payload) is dict
        assert type(payload["data"]) is dict
        assert payload["data"]["notes"] == [1, {"x": 2}]
        payload["scout_id"] = "changed"
        assert env.payload["scout_id"] == "s"

    def test_frozen_payload_still_validates(self):
        env = MessageEnvelope.scout_data("t", "s", "a", "", {"team": 254})
        assert env.validate_payload(strict=True) == []


class TestTimestamp:
    def test_aware_timestamp_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        env = MessageEnvelope.status(50, "a", "b", timestamp=datetime(2024, 1, 1, 12, 0, tzinfo=plus_two))
        assert env.timestamp == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert env.timestamp.utcoffset() == timedelta(0)

    def test_naive_timestamp_taken_as_utc(self):
        env = MessageEnvelope.status(50, "a", "b", timestamp=datetime(2024, 1, 1, 12, 0))
        assert env.timestamp == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestFactories:
    def test_request(self):
        env = MessageEnvelope.request("sync", "dev-a", "dev-b", timestamp=FIXED)
        assert env.kind is MessageKind.REQUEST
        assert env.payload == {"message_type": "sync"}
        assert env.requested_type == "sync"
        assert env.timestamp == FIXED
        assert env.validate_payload() == []

    def test_request_with_extra(self):
        env = MessageEnvelope.request("matches", "dev-a", "", extra={"event": "2024cmp"})
        assert env.payload == {"message_type": "matches", "event": "2024cmp"}
        assert env.validate_payload() == []
        assert env.validate_payload(strict=True) == ['unexpected key "event"']

    def test_scout_data(self):
        env = MessageEnvelope.scout_data("2024-03-09T14:00:00Z", "scout-7", "dev-a", "lead", {"team": 254})
        assert env.kind is MessageKind.SCOUT_DATA
        assert env.payload["data"] == {"team": 254}
        assert env.validate_payload(strict=True) == []

    def test_status(self):
        env = MessageEnvelope.status(87, "dev-a", "")
        assert env.payload == {"battery_level": 87}
        assert env.requested_type is None
        assert env.is_broadcast

    def test_reply_addresses_sender(self):
        req = MessageEnvelope.request("status", "dev-a", "dev-b")
        resp = req.reply(MessageKind.STATUS, {"battery_level": 40}, origin="dev-b")
        assert resp.responds_to == req.message_id
        assert resp.destination == "dev-a"
        assert resp.origin == "dev-b"
        assert resp.message_id != req.message_id


class TestValidation:
    def test_ensure_valid_returns_self(self):
        env = MessageEnvelope.status(10, "a", "")
        assert env.ensure_valid() is env

    def test_ensure_valid_raises(self):
        env = MessageEnvelope(kind=MessageKind.STATUS, payload={"battery_level": "low"})
        with pytest.raises(SchemaViolationError) as exc:
            env.ensure_valid()
        assert exc.value.violations == ['key "battery_level" expected int got string']

    def test_parse_error_flag(self):
        env = MessageEnvelope(kind=MessageKind.PARSE_ERROR, payload={"raw": "x", "reason": "y"})
        assert env.is_parse_error
        assert not MessageEnvelope.status(1, "a", "").is_parse_error


class TestSerialization:
    def test_to_dict_key_order_and_omitted_responds_to(self):
        env = MessageEnvelope.status(50, "dev-a", "dev-b", timestamp=FIXED)
        data = env.to_dict()
        assert list(data) == ["type", "timestamp", "message_id", "origin", "destination", "payload"]
        assert data["type"] == "status"
        assert data["timestamp"] == "2024-03-09T14:30:00.123456Z"

    def test_to_dict_includes_responds_to_when_set(self):
        env = MessageEnvelope.request("x", "a", "b", responds_to="abc")
        assert list(env.to_dict()) == [
            "type", "timestamp", "message_id", "responds_to", "origin", "destination", "payload",
        ]

    def test_to_json_is_deterministic(self):
        env = MessageEnvelope.scout_data("t", "s", "a", "b", {"z": 1, "a": [1, 2]}, timestamp=FIXED)
        assert env.to_json() == env.to_json()
        assert json.loads(env.to_json())["payload"]["data"] == {"z": 1, "a": [1, 2]}

    def test_encoding_does_not_validate(self):
        env = MessageEnvelope(kind=MessageKind.STATUS, payload={"battery_level": "full"})
        assert json.loads(env.to_json())["payload"] == {"battery_level": "full"}

    def test_unserializable_values_are_stringified(self):
        env = MessageEnvelope.request("x", "a", "b", extra={"when": FIXED})
        assert json.loads(env.to_json())["payload"]["when"] == str(FIXED)

    def test_str(self):
        env = MessageEnvelope.request("sync", "a", "b", responds_to="r-1", timestamp=FIXED)
        text = str(env)
        assert text.startswith("Envelope(type=request time=2024-03-09T14:30:00.123456Z")
        assert "responds_to=r-1" in text
