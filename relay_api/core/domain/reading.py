"""Modelos de dominio: lecturas de tanques y comandos."""

from __future__ import annotations

import math
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, field_validator

# Integers stay integers on the wire: 100 is relayed as 100, not 100.0.
Level = Union[StrictInt, StrictFloat]


class TankReading(BaseModel):
    """One telemetry sample for a tank.

    This is the unit that flows through the relay:
    controller -> codec -> persistence + fan-out -> subscribers
    """

    model_config = ConfigDict(frozen=True)

    tank_id: StrictStr = Field(..., min_length=1)
    initial_level: Level
    current_level: Level
    refilling: StrictBool

    @field_validator("initial_level", "current_level")
    @classmethod
    def validate_level(cls, v):
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("Level must be a finite number")
        return v


class IotMessage(BaseModel):
    """Mensaje entrante del controlador IoT.

    Formato esperado:
    {
        "action": "update",
        "tanks_info": [
            {"tank_id": "T1", "initial_level": 100, "current_level": 80, "refilling": false}
        ]
    }
    """

    model_config = ConfigDict(frozen=True)

    action: StrictStr
    tanks_info: List[TankReading]


class Command(BaseModel):
    """Instruction pushed from an administrator down to the controller."""

    model_config = ConfigDict(frozen=True)

    action: StrictStr
    tank_id: StrictStr = Field(..., min_length=1)
    refill: StrictBool
