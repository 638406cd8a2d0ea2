"""
DeviceLocator finds an AirGradient device on the local network via mDNS.

Responsibilities:
- Browse the AirGradient service type and match instance names by substring.
- Resolve the first match to a DeviceAddress and report it exactly once.
- Report a one-shot DiscoveryTimeout when nothing matched in time, while
  continuing to listen so a late device is still picked up.

No HA imports. The AsyncZeroconf instance is supplied and owned by the caller.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from zeroconf import ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from .const import RESOLVE_TIMEOUT_MS, SERVICE_NAME_PREFIX, SERVICE_TYPE
from .errors import DiscoveryTimeout
from .models import DeviceAddress

_LOGGER = logging.getLogger(__name__)


def serial_from_service_name(name: str) -> str | None:
    """
    Extract the serial number from an advertised instance name.

    "airgradient_84fce612f5b8._airgradient._tcp.local." -> "84fce612f5b8"
    """
    instance = name.split(".", 1)[0]
    if not instance.startswith(SERVICE_NAME_PREFIX):
        return None
    return instance[len(SERVICE_NAME_PREFIX):] or None


class DeviceLocator:
    """Resolves the address of a single device by advertised service name."""

    def __init__(self, aiozc: AsyncZeroconf, service_type: str = SERVICE_TYPE) -> None:
        self._aiozc = aiozc
        self._service_type = service_type
        self._browser: AsyncServiceBrowser | None = None
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._resolve_tasks: set[asyncio.Task] = set()

        self._identity: str | None = None
        self._on_found: Callable[[DeviceAddress], None] | None = None
        self._on_not_found: Callable[[DiscoveryTimeout], None] | None = None

        # Set as soon as a matching name is seen, before resolution finishes,
        # so overlapping advertisements cannot start a second resolution.
        self._matched: bool = False
        self.address: DeviceAddress | None = None

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def locate(
        self,
        identity: str,
        on_found: Callable[[DeviceAddress], None],
        not_found_after: float,
        on_not_found: Callable[[DiscoveryTimeout], None] | None = None,
    ) -> None:
        """
        Start browsing for a service instance whose name contains identity.

        Must be called from the running event loop. Returns immediately.
        """
        if self._browser is not None:
            raise RuntimeError("DeviceLocator.locate() has already been called")

        self._identity = identity
        self._on_found = on_found
        self._on_not_found = on_not_found

        _LOGGER.debug("Starting device discovery for '%s' on %s", identity, self._service_type)
        loop = asyncio.get_running_loop()
        self._timeout_handle = loop.call_later(not_found_after, self._report_not_found, not_found_after)
        self._browser = AsyncServiceBrowser(
            self._aiozc.zeroconf,
            [self._service_type],
            handlers=[self._on_service_state_change],
        )

    async def async_stop(self) -> None:
        """Stop the browser and cancel pending timers and resolutions."""
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        for task in self._resolve_tasks:
            task.cancel()
        await asyncio.gather(*self._resolve_tasks, return_exceptions=True)
        self._resolve_tasks.clear()
        if self._browser is not None:
            await self._browser.async_cancel()
            self._browser = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_service_state_change(
        self,
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        state_change: ServiceStateChange,
    ) -> None:
        """Browser callback, invoked on the event loop for each advertisement change."""
        if state_change not in (ServiceStateChange.Added, ServiceStateChange.Updated):
            return
        if self._matched or self._identity is None or self._identity not in name:
            return

        self._matched = True
        _LOGGER.debug("Matched service %s, resolving", name)
        task = asyncio.ensure_future(self._resolve(zeroconf, service_type, name))
        self._resolve_tasks.add(task)
        task.add_done_callback(self._resolve_tasks.discard)

    async def _resolve(self, zeroconf: Zeroconf, service_type: str, name: str) -> None:
        try:
            info = AsyncServiceInfo(service_type, name)
            found = await info.async_request(zeroconf, RESOLVE_TIMEOUT_MS)
            addresses = info.parsed_addresses() if found else []
        except Exception as exc:  # noqa: BLE001
            _LOGGER.exception("Error resolving %s: %s", name, exc)
            self._matched = False
            return
        if not addresses or not info.port:
            # Release the match so a later advertisement can try again
            _LOGGER.warning("Could not resolve address of %s", name)
            self._matched = False
            return

        self.address = DeviceAddress(host=addresses[0], port=info.port)
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        _LOGGER.info("Device found at %s", self.address)
        if self._on_found is None:
            return
        try:
            self._on_found(self.address)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.exception("Error handling found device %s: %s", name, exc)
            self.address = None
            self._matched = False

    def _report_not_found(self, timeout: float) -> None:
        self._timeout_handle = None
        if self.address is not None:
            return
        error = DiscoveryTimeout(self._identity or "", timeout)
        _LOGGER.error("No device found: %s", self._identity)
        if self._on_not_found is not None:
            self._on_not_found(error)
