"""Codec de telemetría entrante.

Parses and validates what a controller sends on its link, and serializes
readings and commands for the wire. Pure functions: no I/O, no registry or
store access.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..domain.reading import Command, IotMessage, TankReading
from ...errors import ValidationError

INVALID_DATA_MESSAGE = "Invalid data"


@dataclass
class DecodeResult:
    """Resultado de decodificar un mensaje del controlador."""
    valid: bool
    action: Optional[str] = None
    readings: List[TankReading] = field(default_factory=list)
    error: Optional[ValidationError] = None


def decode(raw: Union[bytes, str]) -> DecodeResult:
    """Decode one inbound controller message.

    Returns a valid result carrying the readings in payload order (possibly
    empty), or an invalid one carrying a ValidationError whose details list
    every violation, first violation first.
    """
    try:
        message = IotMessage.model_validate_json(raw)
    except PydanticValidationError as e:
        details = [
            {"type": err["type"], "loc": list(err["loc"]), "msg": err["msg"]}
            for err in e.errors(include_url=False, include_context=False, include_input=False)
        ]
        return DecodeResult(valid=False, error=ValidationError(INVALID_DATA_MESSAGE, details))

    return DecodeResult(valid=True, action=message.action, readings=list(message.tanks_info))


def encode_reading(reading: TankReading) -> str:
    return reading.model_dump_json()


def encode_command(command: Command) -> str:
    return command.model_dump_json()


def encode_error(error: ValidationError) -> str:
    return json.dumps(error.to_reply(), separators=(",", ":"))
