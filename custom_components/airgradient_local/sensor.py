"""
Platform for AirGradient sensor integration.
This module is responsible for setting up the air quality, PM2.5, PM10, CO2 and
temperature entities. Entities hold no values of their own: they read through
the DeviceMonitor and report unavailable while the device is unreachable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from homeassistant import config_entries
from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import (
    CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
    CONCENTRATION_PARTS_PER_MILLION,
    UnitOfTemperature,
)
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, MANUFACTURER
from .entity_sink import EntitySink
from .errors import CommunicationFailure
from .models import MeasurementKind
from .monitor import DeviceMonitor

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class AirGradientSensorDescription(SensorEntityDescription):
    """Sensor description bound to a MeasurementKind."""

    kind: MeasurementKind


SENSOR_DESCRIPTIONS: tuple[AirGradientSensorDescription, ...] = (
    AirGradientSensorDescription(
        key="air_quality",
        kind=MeasurementKind.AIR_QUALITY,
        name="Air Quality",
        icon="mdi:air-filter",
        state_class=SensorStateClass.MEASUREMENT,
    ),
    AirGradientSensorDescription(
        key="pm25",
        kind=MeasurementKind.PM25,
        name="PM2.5",
        device_class=SensorDeviceClass.PM25,
        native_unit_of_measurement=CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
        state_class=SensorStateClass.MEASUREMENT,
    ),
    AirGradientSensorDescription(
        key="pm10",
        kind=MeasurementKind.PM10,
        name="PM10",
        device_class=SensorDeviceClass.PM10,
        native_unit_of_measurement=CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
        state_class=SensorStateClass.MEASUREMENT,
    ),
    AirGradientSensorDescription(
        key="co2",
        kind=MeasurementKind.CO2,
        name="Carbon Dioxide",
        device_class=SensorDeviceClass.CO2,
        native_unit_of_measurement=CONCENTRATION_PARTS_PER_MILLION,
        state_class=SensorStateClass.MEASUREMENT,
    ),
    AirGradientSensorDescription(
        key="temperature",
        kind=MeasurementKind.TEMPERATURE,
        name="Temperature",
        device_class=SensorDeviceClass.TEMPERATURE,
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        state_class=SensorStateClass.MEASUREMENT,
    ),
)


class AirGradientSensor(SensorEntity):
    """
    Representation of one AirGradient measurement.
    Takes the data from the DeviceMonitor created in async_setup_entry.
    """

    entity_description: AirGradientSensorDescription

    def __init__(
        self,
        monitor: DeviceMonitor,
        sink: EntitySink,
        description: AirGradientSensorDescription,
    ) -> None:
        """Initialize the sensor."""
        self.entity_description = description
        self._monitor = monitor
        self._sink = sink
        self._attr_unique_id = f"airgradient_{monitor.serial_number}_{description.key}"
        self._attr_name = f"{monitor.name} {description.name}"

    async def async_added_to_hass(self) -> None:
        self._sink.register(self.entity_description.kind, self)

    async def async_will_remove_from_hass(self) -> None:
        self._sink.unregister(self.entity_description.kind)

    @property
    def should_poll(self) -> bool:
        # The monitor pushes a state write after every accepted reading
        return False

    @property
    def available(self) -> bool:
        return self._monitor.connected

    @property
    def native_value(self) -> float | int | None:
        try:
            return self._monitor.read_measurement(self.entity_description.kind)
        except CommunicationFailure:
            return None

    @property
    def device_info(self) -> DeviceInfo:
        """Return the device info."""
        state = self._monitor.state
        model = state.latest_reading.fw_mode if state.latest_reading is not None else None
        return DeviceInfo(
            identifiers={(DOMAIN, self._monitor.serial_number)},
            name=self._monitor.name,
            manufacturer=MANUFACTURER,
            model=model,
            serial_number=self._monitor.serial_number,
            sw_version=state.firmware_version,
        )


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Add sensors for passed config_entry in HA."""
    runtime = hass.data[DOMAIN][config_entry.entry_id]
    entities = [
        AirGradientSensor(runtime.monitor, runtime.sink, description)
        for description in SENSOR_DESCRIPTIONS
    ]
    _LOGGER.debug("Adding %s AirGradient sensors for %s", len(entities), runtime.monitor.name)
    async_add_entities(entities)
