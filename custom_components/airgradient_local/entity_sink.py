"""
Home Assistant implementation of MeasurementSink.

Entities register themselves per MeasurementKind when added to hass; pushed
measurements schedule a state write on the matching entity, and pushed device
info is written to the device registry.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from homeassistant.core import HomeAssistant
from homeassistant.helpers import device_registry as dr

from .const import DOMAIN
from .models import MeasurementKind

_LOGGER = logging.getLogger(__name__)


class MeasurementEntity(Protocol):
    def async_write_ha_state(self) -> None: ...


class EntitySink:
    """Routes monitor pushes to entities and the device registry."""

    def __init__(self, hass: HomeAssistant, serial_number: str) -> None:
        self._hass = hass
        self._serial_number = serial_number
        self._entities: dict[MeasurementKind, MeasurementEntity] = {}

    def register(self, kind: MeasurementKind, entity: MeasurementEntity) -> None:
        self._entities[kind] = entity

    def unregister(self, kind: MeasurementKind) -> None:
        self._entities.pop(kind, None)

    def push_measurement(self, kind: MeasurementKind, value: Any) -> None:
        entity = self._entities.get(kind)
        if entity is None:
            _LOGGER.debug("No entity registered for %s, dropping value %s", kind.value, value)
            return
        # Entities read the value back through the monitor, so only the write is needed
        entity.async_write_ha_state()

    def push_device_info(self, firmware_version: str | None, model: str | None) -> None:
        """
        Update firmware and model of the device registry entry.

        The entry only exists once the sensor platform has added its entities;
        before that, entities report the monitor's current firmware in their DeviceInfo.
        """
        registry = dr.async_get(self._hass)
        device = registry.async_get_device(identifiers={(DOMAIN, self._serial_number)})
        if device is None:
            _LOGGER.debug("Device %s not registered yet, skipping info update", self._serial_number)
            return
        registry.async_update_device(device.id, sw_version=firmware_version, model=model)
        _LOGGER.debug(
            "Updated device info for %s: firmware=%s, model=%s",
            self._serial_number, firmware_version, model,
        )
