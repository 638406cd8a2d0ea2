"""
DeviceState: immutable snapshot of everything the monitor knows about its device.

This is a pure data module with no HA or network dependencies.
"""
from __future__ import annotations

import dataclasses

from .models import DeviceAddress, Reading


@dataclasses.dataclass(frozen=True)
class DeviceState:
    """
    Typed, copy-on-write snapshot of the monitored device.

    Always replace via dataclasses.replace(), never mutate in place.
    Readers grab the current object once and see a consistent view.
    """

    # Last reading accepted from the device (kept when connectivity drops)
    latest_reading: Reading | None = None

    # Rank derived from latest_reading
    rank: int | None = None

    # Whether the last poll succeeded
    connected: bool = False

    # Resolved once by discovery, never changed afterwards
    address: DeviceAddress | None = None

    # Firmware reported with latest_reading, used to detect upgrades
    firmware_version: str | None = None
