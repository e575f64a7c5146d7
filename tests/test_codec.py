"""Tests del codec de mensajes del controlador."""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from relay_api.core.domain.reading import Command, TankReading
from relay_api.core.validation.codec import (
    decode,
    encode_command,
    encode_error,
    encode_reading,
)
from relay_api.errors import ValidationError

from conftest import T1_WIRE, UPDATE_MESSAGE


def _locs(result):
    return [tuple(d["loc"]) for d in result.error.details]


# =============================================================================
# DECODE: PAYLOADS VÁLIDOS
# =============================================================================

class TestDecodeValid:

    def test_update_message(self):
        result = decode(json.dumps(UPDATE_MESSAGE))

        assert result.valid is True
        assert result.error is None
        assert result.action == "update"
        assert result.readings == [
            TankReading(tank_id="T1", initial_level=100, current_level=80, refilling=False),
        ]

    def test_accepts_bytes(self):
        result = decode(json.dumps(UPDATE_MESSAGE).encode("utf-8"))
        assert result.valid is True
        assert len(result.readings) == 1

    def test_empty_batch_is_valid(self):
        result = decode('{"action": "update", "tanks_info": []}')
        assert result.valid is True
        assert result.readings == []

    def test_preserves_order(self):
        payload = {
            "action": "update",
            "tanks_info": [
                {"tank_id": tank_id, "initial_level": 10, "current_level": 5, "refilling": True}
                for tank_id in ("T3", "T1", "T2")
            ],
        }
        result = decode(json.dumps(payload))
        assert [r.tank_id for r in result.readings] == ["T3", "T1", "T2"]

    def test_float_levels(self):
        payload = {
            "action": "update",
            "tanks_info": [{"tank_id": "T1", "initial_level": 99.5, "current_level": 12.25, "refilling": True}],
        }
        reading = decode(json.dumps(payload)).readings[0]
        assert reading.initial_level == 99.5
        assert reading.current_level == 12.25

    def test_extra_keys_are_dropped(self):
        payload = {
            "action": "update",
            "tanks_info": [
                {"tank_id": "T1", "initial_level": 100, "current_level": 80, "refilling": False, "firmware": "1.2"},
            ],
        }
        reading = decode(json.dumps(payload)).readings[0]
        assert encode_reading(reading) == T1_WIRE


# =============================================================================
# DECODE: PAYLOADS INVÁLIDOS
# =============================================================================

class TestDecodeInvalid:

    def test_missing_fields(self):
        result = decode('{"action": "update", "tanks_info": [{"tank_id": "T1"}]}')

        assert result.valid is False
        assert result.readings == []
        assert isinstance(result.error, ValidationError)
        assert result.error.message == "Invalid data"
        assert _locs(result) == [
            ("tanks_info", 0, "initial_level"),
            ("tanks_info", 0, "current_level"),
            ("tanks_info", 0, "refilling"),
        ]
        assert all(d["type"] == "missing" for d in result.error.details)

    def test_malformed_json(self):
        result = decode("{not json")
        assert result.valid is False
        assert result.error.details[0]["type"] == "json_invalid"

    def test_missing_action(self):
        result = decode('{"tanks_info": []}')
        assert result.valid is False
        assert _locs(result) == [("action",)]

    def test_tanks_info_not_a_list(self):
        result = decode('{"action": "update", "tanks_info": {"tank_id": "T1"}}')
        assert result.valid is False
        assert _locs(result)[0][0] == "tanks_info"

    def test_top_level_not_an_object(self):
        result = decode("[1, 2, 3]")
        assert result.valid is False

    def test_numeric_string_is_not_a_level(self):
        payload = {
            "action": "update",
            "tanks_info": [{"tank_id": "T1", "initial_level": 100, "current_level": "80", "refilling": False}],
        }
        result = decode(json.dumps(payload))
        assert result.valid is False
        assert all(loc[:3] == ("tanks_info", 0, "current_level") for loc in _locs(result))

    def test_integer_is_not_a_boolean(self):
        payload = {
            "action": "update",
            "tanks_info": [{"tank_id": "T1", "initial_level": 100, "current_level": 80, "refilling": 1}],
        }
        result = decode(json.dumps(payload))
        assert result.valid is False
        assert _locs(result) == [("tanks_info", 0, "refilling")]

    def test_boolean_is_not_a_level(self):
        payload = {
            "action": "update",
            "tanks_info": [{"tank_id": "T1", "initial_level": True, "current_level": 80, "refilling": False}],
        }
        assert decode(json.dumps(payload)).valid is False

    def test_integer_tank_id_rejected(self):
        payload = {
            "action": "update",
            "tanks_info": [{"tank_id": 7, "initial_level": 100, "current_level": 80, "refilling": False}],
        }
        result = decode(json.dumps(payload))
        assert result.valid is False
        assert _locs(result) == [("tanks_info", 0, "tank_id")]

    def test_empty_tank_id_rejected(self):
        payload = {
            "action": "update",
            "tanks_info": [{"tank_id": "", "initial_level": 100, "current_level": 80, "refilling": False}],
        }
        assert decode(json.dumps(payload)).valid is False

    def test_second_element_reported(self):
        payload = {
            "action": "update",
            "tanks_info": [
                {"tank_id": "T1", "initial_level": 100, "current_level": 80, "refilling": False},
                {"tank_id": "T2", "initial_level": 100, "refilling": False},
            ],
        }
        result = decode(json.dumps(payload))
        assert result.valid is False
        assert _locs(result) == [("tanks_info", 1, "current_level")]


# =============================================================================
# ENCODE
# =============================================================================

class TestEncode:

    def test_reading_wire_format(self):
        reading = TankReading(tank_id="T1", initial_level=100, current_level=80, refilling=False)
        assert encode_reading(reading) == T1_WIRE

    def test_command_wire_format(self):
        command = Command(action="refill", tank_id="T1", refill=True)
        assert json.loads(encode_command(command)) == {"action": "refill", "tank_id": "T1", "refill": True}

    def test_error_reply(self):
        error = decode('{"action": "update", "tanks_info": [{"tank_id": "T1"}]}').error
        reply = json.loads(encode_error(error))

        assert reply["status"] == "error"
        assert reply["message"] == "Invalid data"
        assert reply["details"][0]["loc"] == ["tanks_info", 0, "initial_level"]
        assert set(reply["details"][0]) == {"type", "loc", "msg"}

    def test_readings_are_immutable(self):
        reading = TankReading(tank_id="T1", initial_level=100, current_level=80, refilling=False)
        with pytest.raises(PydanticValidationError):
            reading.current_level = 10
