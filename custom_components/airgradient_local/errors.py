"""
Error taxonomy for the AirGradient integration.

Only CommunicationFailure is ever raised to callers reading measurements;
the others are caught inside the monitor or reported through callbacks.
"""


class AirGradientError(Exception):
    """Base class for all AirGradient errors."""


class DiscoveryTimeout(AirGradientError):
    """No matching advertisement arrived in time. Advisory only."""

    def __init__(self, identity: str, timeout: float) -> None:
        self.identity = identity
        self.timeout = timeout
        super().__init__(f"No device matching '{identity}' found after {timeout}s")


class TransportError(AirGradientError):
    """The telemetry request failed at the network level."""


class MalformedResponseError(AirGradientError):
    """The telemetry payload could not be decoded into a Reading."""


class CommunicationFailure(AirGradientError):
    """The device is not currently reachable, so no live value can be returned."""
