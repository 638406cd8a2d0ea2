"""
Outward interface of the monitor.

The monitor pushes every accepted measurement through a MeasurementSink.
Implementations decide how to surface them (see entity_sink.py for Home Assistant).
"""
from __future__ import annotations

from typing import Any, Protocol

from .models import MeasurementKind


class MeasurementSink(Protocol):
    """Receives values from the monitor whenever new data is accepted."""

    def push_measurement(self, kind: MeasurementKind, value: Any) -> None: ...

    def push_device_info(self, firmware_version: str | None, model: str | None) -> None: ...
