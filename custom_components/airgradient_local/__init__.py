import logging
from dataclasses import dataclass

from homeassistant import config_entries, core
from homeassistant.components import zeroconf
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import (
    CONF_NAME,
    CONF_POLL_INTERVAL,
    CONF_SERIAL_NUMBER,
    DEFAULT_NAME,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
)
from .entity_sink import EntitySink
from .locator import DeviceLocator
from .monitor import DeviceMonitor
from .telemetry import TelemetryClient, request_timeout_for

PLATFORMS: list[Platform] = [Platform.SENSOR]
_LOGGER = logging.getLogger(__name__)


@dataclass
class AirGradientRuntime:
    """Objects shared between the entry and its platforms."""

    monitor: DeviceMonitor
    sink: EntitySink


def entry_option(entry: config_entries.ConfigEntry, key: str, default):
    """Options override the data the entry was created with."""
    if key in entry.options:
        return entry.options[key]
    return entry.data.get(key, default)


async def async_setup(hass: core.HomeAssistant, config: dict) -> bool:
    """Set up the integration."""
    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(
    hass: core.HomeAssistant, entry: config_entries.ConfigEntry
) -> bool:
    """Set up platform from a ConfigEntry."""
    name = entry_option(entry, CONF_NAME, DEFAULT_NAME)
    serial_number = entry.data[CONF_SERIAL_NUMBER]
    poll_interval = entry_option(entry, CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)

    aiozc = await zeroconf.async_get_async_instance(hass)
    client = TelemetryClient(
        async_get_clientsession(hass),
        timeout=request_timeout_for(poll_interval),
    )
    sink = EntitySink(hass, serial_number)
    monitor = DeviceMonitor(
        name=name,
        serial_number=serial_number,
        poll_interval=poll_interval,
        locator=DeviceLocator(aiozc),
        client=client,
        sink=sink,
    )
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = AirGradientRuntime(monitor, sink)

    entry.async_on_unload(
        entry.add_update_listener(_async_update_listener)
    )

    # Entities must be registered with the sink before the first reading arrives
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    _LOGGER.debug("Starting AirGradient monitor for %s (%s)", name, serial_number)
    monitor.start()
    return True


async def _async_update_listener(hass: HomeAssistant, config_entry):
    """Handle config options update."""
    # Reload the integration when the options change.
    await hass.config_entries.async_reload(config_entry.entry_id)


async def async_unload_entry(
    hass: core.HomeAssistant, entry: config_entries.ConfigEntry
) -> bool:
    """Unload a config entry."""
    unloaded = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unloaded:
        runtime: AirGradientRuntime = hass.data[DOMAIN].pop(entry.entry_id)
        await runtime.monitor.async_stop()
    return unloaded
