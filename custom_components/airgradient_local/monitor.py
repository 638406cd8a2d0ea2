"""
DeviceMonitor for the AirGradient integration.

Responsibilities:
- Own the DeviceLocator, the TelemetryClient and the poll task for one device.
- Move from discovering to polling once the device address is resolved.
- Poll at a fixed rate, never issuing overlapping requests.
- Classify each accepted reading and keep a DeviceState snapshot.
- Push accepted values to a MeasurementSink and serve on-demand reads.

No HA imports.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any

from .classifier import classify
from .const import DISCOVERY_TIMEOUT, SERVICE_NAME_PREFIX
from .device_state import DeviceState
from .errors import CommunicationFailure, DiscoveryTimeout, MalformedResponseError, TransportError
from .locator import DeviceLocator
from .models import DeviceAddress, MeasurementKind, Reading
from .sink import MeasurementSink
from .telemetry import TelemetryClient

_LOGGER = logging.getLogger(__name__)


def measurement_value(state: DeviceState, kind: MeasurementKind) -> Any:
    """Return the value of kind held in state, or None if nothing was accepted yet."""
    reading = state.latest_reading
    if reading is None:
        return None
    if kind is MeasurementKind.AIR_QUALITY:
        return state.rank
    if kind is MeasurementKind.PM25:
        return reading.pm02
    if kind is MeasurementKind.PM10:
        return reading.pm10
    if kind is MeasurementKind.CO2:
        return reading.rco2
    if kind is MeasurementKind.TEMPERATURE:
        return reading.atmp
    raise ValueError(f"Unknown measurement kind: {kind}")


class DeviceMonitor:
    """
    Tracks a single AirGradient device.

    The state snapshot is only replaced by the discovery callback and the
    poll task; readers always see one complete DeviceState.
    """

    def __init__(
        self,
        name: str,
        serial_number: str,
        poll_interval: float,
        locator: DeviceLocator,
        client: TelemetryClient,
        sink: MeasurementSink,
    ) -> None:
        """Initialize the monitor. Nothing runs until start() is called."""
        self.name = name
        self.serial_number = serial_number
        self.poll_interval = poll_interval
        self._locator = locator
        self._client = client
        self._sink = sink

        self._poll_task: asyncio.Task | None = None
        self._poll_lock = asyncio.Lock()
        self._started: bool = False

        # Snapshot starts empty; readers get CommunicationFailure until the first accepted reading
        self.state = DeviceState()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def identity(self) -> str:
        """Substring the advertised service name must contain."""
        return f"{SERVICE_NAME_PREFIX}{self.serial_number}"

    def start(self) -> None:
        """Start discovery. Must be called from the running event loop."""
        if self._started:
            return
        self._started = True
        self._locator.locate(
            self.identity,
            self._on_device_found,
            DISCOVERY_TIMEOUT,
            self._on_device_not_found,
        )

    async def async_stop(self) -> None:
        """Cancel the poll task and stop discovery."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None
        await self._locator.async_stop()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self.state.connected

    @property
    def discovering(self) -> bool:
        return self.state.address is None

    @property
    def address(self) -> DeviceAddress | None:
        return self.state.address

    def read_measurement(self, kind: MeasurementKind) -> Any:
        """
        Return the last accepted value for kind.

        Raises CommunicationFailure while the device is not connected, so
        callers never present stale values as live.
        """
        state = self.state
        if not state.connected or state.latest_reading is None:
            raise CommunicationFailure(f"{self.name} is not reachable")
        return measurement_value(state, kind)

    # ------------------------------------------------------------------
    # Discovery callbacks
    # ------------------------------------------------------------------

    def _on_device_found(self, address: DeviceAddress) -> None:
        if self.state.address is not None:
            _LOGGER.debug("Ignoring %s, %s already resolved to %s", address, self.name, self.state.address)
            return
        self.state = dataclasses.replace(self.state, address=address)
        self._poll_task = asyncio.ensure_future(self._poll_loop())

    def _on_device_not_found(self, error: DiscoveryTimeout) -> None:
        _LOGGER.warning("%s: %s, still listening for it", self.name, error)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def _poll_loop(self) -> None:
        """Poll immediately, then at a fixed rate until cancelled."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            try:
                await self.async_poll()
            except Exception as exc:  # noqa: BLE001
                _LOGGER.exception("Unexpected error polling %s: %s", self.name, exc)
            next_tick += self.poll_interval
            now = loop.time()
            if next_tick < now:
                # A slow poll overran one or more ticks; skip them rather than bunching up
                missed = int((now - next_tick) // self.poll_interval) + 1
                _LOGGER.debug("Skipping %s missed poll tick(s) for %s", missed, self.name)
                next_tick += missed * self.poll_interval
            await asyncio.sleep(next_tick - now)

    async def async_poll(self) -> None:
        """
        Fetch one reading and apply it.

        Returns immediately if a poll is already in flight. Client errors
        only flip connectivity off; the previous reading is kept.
        """
        address = self.state.address
        if address is None:
            _LOGGER.debug("%s has no address yet, skipping poll", self.name)
            return
        if self._poll_lock.locked():
            _LOGGER.debug("Poll for %s still in flight, skipping", self.name)
            return

        async with self._poll_lock:
            try:
                reading = await self._client.async_fetch_current(address)
            except (TransportError, MalformedResponseError) as exc:
                if self.state.connected:
                    _LOGGER.warning("Lost connection to %s at %s: %s", self.name, address, exc)
                else:
                    _LOGGER.debug("%s still unreachable at %s: %s", self.name, address, exc)
                self.state = dataclasses.replace(self.state, connected=False)
                return
            except Exception:
                # Unknown failure: never keep presenting the old reading as live
                self.state = dataclasses.replace(self.state, connected=False)
                raise

            self._apply_reading(reading)

    def _apply_reading(self, reading: Reading) -> None:
        if reading.is_booting:
            _LOGGER.debug("%s still booting...", self.name)
            return

        firmware_changed = reading.firmware_version != self.state.firmware_version
        rank = classify(reading.pm02, reading.pm10, reading.rco2)
        self.state = dataclasses.replace(
            self.state,
            latest_reading=reading,
            rank=rank,
            connected=True,
            firmware_version=reading.firmware_version,
        )
        _LOGGER.debug("Updated %s: rank=%s, reading=%s", self.name, rank, reading)

        if firmware_changed:
            try:
                self._sink.push_device_info(reading.firmware_version, reading.fw_mode)
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error("Failed to push device info for %s: %s", self.name, exc)

        for kind in MeasurementKind:
            try:
                self._sink.push_measurement(kind, measurement_value(self.state, kind))
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error("Failed to push %s for %s: %s", kind.value, self.name, exc)
