"""
Unit tests for __init__.py async_setup_entry / async_unload_entry.

Coverage:
- setup builds the monitor from entry data, starts discovery after the
  platforms are forwarded, and stores the runtime objects
- options override entry data (name, poll interval) and the request timeout
  follows the poll interval
- unload stops the monitor only when the platforms unloaded
"""

from __future__ import annotations

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from custom_components.airgradient_local.const import DOMAIN

from .test_common import SERIAL


def _make_mock_entry(options: dict | None = None) -> MagicMock:
    """Return a minimal mock ConfigEntry."""
    entry = MagicMock()
    entry.entry_id = "entry-1"
    entry.data = {
        "name": "Living Room",
        "serial_number": SERIAL,
        "poll_interval": 30,
    }
    entry.options = options or {}
    entry.async_on_unload = MagicMock()
    entry.add_update_listener = MagicMock(return_value=MagicMock())
    return entry


def _make_hass() -> MagicMock:
    hass = MagicMock()
    hass.data = {}
    hass.config_entries.async_forward_entry_setups = AsyncMock()
    hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    return hass


class TestAsyncSetupEntry(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.patches = [
            patch(
                "custom_components.airgradient_local.zeroconf.async_get_async_instance",
                new=AsyncMock(return_value=MagicMock()),
            ),
            patch(
                "custom_components.airgradient_local.async_get_clientsession",
                return_value=MagicMock(),
            ),
            patch("custom_components.airgradient_local.DeviceLocator"),
        ]
        started = [p.start() for p in self.patches]
        self.locator_cls = started[2]

    async def asyncTearDown(self):
        for p in self.patches:
            p.stop()

    async def test_setup_creates_and_starts_monitor(self):
        from custom_components.airgradient_local import async_setup_entry

        hass = _make_hass()
        entry = _make_mock_entry()

        result = await async_setup_entry(hass, entry)

        self.assertTrue(result)
        runtime = hass.data[DOMAIN]["entry-1"]
        self.assertEqual(runtime.monitor.name, "Living Room")
        self.assertEqual(runtime.monitor.serial_number, SERIAL)
        self.assertEqual(runtime.monitor.poll_interval, 30)
        hass.config_entries.async_forward_entry_setups.assert_awaited_once()
        self.locator_cls.return_value.locate.assert_called_once()
        self.assertEqual(
            self.locator_cls.return_value.locate.call_args.args[0],
            f"airgradient_{SERIAL}",
        )

    async def test_options_override_data(self):
        from custom_components.airgradient_local import async_setup_entry

        hass = _make_hass()
        entry = _make_mock_entry(options={"name": "Bedroom", "poll_interval": 8})

        await async_setup_entry(hass, entry)

        monitor = hass.data[DOMAIN]["entry-1"].monitor
        self.assertEqual(monitor.name, "Bedroom")
        self.assertEqual(monitor.poll_interval, 8)
        self.assertEqual(monitor._client.timeout, 4)

    async def test_update_listener_registered(self):
        from custom_components.airgradient_local import async_setup_entry

        hass = _make_hass()
        entry = _make_mock_entry()

        await async_setup_entry(hass, entry)

        entry.add_update_listener.assert_called_once()
        entry.async_on_unload.assert_called_once()


class TestAsyncUnloadEntry(unittest.IsolatedAsyncioTestCase):

    async def test_unload_stops_monitor(self):
        from custom_components.airgradient_local import async_unload_entry

        hass = _make_hass()
        runtime = MagicMock()
        runtime.monitor.async_stop = AsyncMock()
        hass.data = {DOMAIN: {"entry-1": runtime}}

        result = await async_unload_entry(hass, _make_mock_entry())

        self.assertTrue(result)
        runtime.monitor.async_stop.assert_awaited_once()
        self.assertNotIn("entry-1", hass.data[DOMAIN])

    async def test_failed_unload_keeps_monitor(self):
        from custom_components.airgradient_local import async_unload_entry

        hass = _make_hass()
        hass.config_entries.async_unload_platforms = AsyncMock(return_value=False)
        runtime = MagicMock()
        runtime.monitor.async_stop = AsyncMock()
        hass.data = {DOMAIN: {"entry-1": runtime}}

        result = await async_unload_entry(hass, _make_mock_entry())

        self.assertFalse(result)
        runtime.monitor.async_stop.assert_not_awaited()
