"""
Domain models for the AirGradient integration.

This module contains pure data classes representing AirGradient telemetry.
These classes have no dependencies on HTTP, discovery, or Home Assistant internals.
"""
from __future__ import annotations

import dataclasses
import enum
import math
from typing import Any

from .errors import MalformedResponseError

# Payload fields the integration interprets; everything else is kept in Reading.extra
_CONSUMED_FIELDS = ("boot", "pm02", "pm10", "rco2", "atmp", "firmwareVersion", "fwMode", "serialno")


class MeasurementKind(str, enum.Enum):
    """Measurements exposed to sinks and readers."""

    AIR_QUALITY = "air_quality"
    PM25 = "pm25"
    PM10 = "pm10"
    CO2 = "co2"
    TEMPERATURE = "temperature"


@dataclasses.dataclass(frozen=True)
class DeviceAddress:
    """Host and port of a discovered device."""

    host: str
    port: int

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"

    def __str__(self) -> str:
        return self.url


def _number(payload: dict, key: str, non_negative: bool = True) -> float:
    value = payload.get(key)
    # bool is an int subclass but never a valid measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"Field '{key}' is missing or not numeric: {value!r}")
    if not math.isfinite(value):
        raise MalformedResponseError(f"Field '{key}' is not finite: {value!r}")
    if non_negative and value < 0:
        raise MalformedResponseError(f"Field '{key}' is negative: {value!r}")
    return value


def _optional_str(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    return str(value)


@dataclasses.dataclass(frozen=True)
class Reading:
    """Representation of one /measures/current snapshot."""

    boot: int
    pm02: float
    pm10: float
    rco2: float
    atmp: float
    firmware_version: str | None = None
    fw_mode: str | None = None
    serial_number: str | None = None
    # Remaining payload fields (wifi, pm01, rhum, tvocIndex, ...) passed through untouched
    extra: dict[str, Any] = dataclasses.field(default_factory=dict, compare=False)

    @property
    def is_booting(self) -> bool:
        """The device reports boot == 0 until its first measurement cycle completes."""
        return self.boot == 0

    @classmethod
    def from_json(cls, payload: Any) -> Reading:
        """
        Map a decoded JSON payload onto a Reading.

        Raises MalformedResponseError if the payload is not an object or a
        field needed for classification is missing, non-numeric or negative.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"Expected a JSON object, got {type(payload).__name__}")

        return cls(
            boot=int(_number(payload, "boot")),
            pm02=_number(payload, "pm02"),
            pm10=_number(payload, "pm10"),
            rco2=_number(payload, "rco2"),
            # Ambient temperature can legitimately drop below zero
            atmp=_number(payload, "atmp", non_negative=False),
            firmware_version=_optional_str(payload, "firmwareVersion"),
            fw_mode=_optional_str(payload, "fwMode"),
            serial_number=_optional_str(payload, "serialno"),
            extra={k: v for k, v in payload.items() if k not in _CONSUMED_FIELDS},
        )
