"""
Low-level HTTP client for the AirGradient local API.
This module performs a single request per call with no retry; the poll loop
owns the retry policy. Every failure is mapped onto TransportError or
MalformedResponseError.
"""
from __future__ import annotations

import asyncio
import json
import logging

import aiohttp

from .const import MEASURES_PATH, REQUEST_TIMEOUT
from .errors import MalformedResponseError, TransportError
from .models import DeviceAddress, Reading

_LOGGER = logging.getLogger(__name__)


def request_timeout_for(poll_interval: float) -> float:
    """Per-request timeout, kept below the poll interval so requests never overlap."""
    return min(REQUEST_TIMEOUT, poll_interval / 2)


class TelemetryClient:
    """Fetches current measurements from an AirGradient device."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        """
        Args:
            session: Shared client session. When None a short-lived session is
                opened for every request.
            timeout: Total timeout in seconds for one request.
        """
        self._session = session
        self.timeout = timeout

    async def async_fetch_current(self, address: DeviceAddress) -> Reading:
        """
        Fetch and decode /measures/current from the device.

        Corresponding CURL command:
        curl -X 'GET' 'http://{host}:{port}/measures/current'

        Raises:
            TransportError: On connection failure, timeout or non-200 status
            MalformedResponseError: If the body is not a valid reading
        """
        url = address.url + MEASURES_PATH
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        _LOGGER.debug("Polling data from AirGradient at %s", url)

        try:
            if self._session is None:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    payload = await self._get_json(session, url, timeout)
            else:
                payload = await self._get_json(self._session, url, timeout)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise TransportError(f"Timeout after {self.timeout}s requesting {url}") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Error requesting {url}: {exc}") from exc

        _LOGGER.debug("Received data from %s: %s", url, payload)
        return Reading.from_json(payload)

    @staticmethod
    async def _get_json(session: aiohttp.ClientSession, url: str, timeout: aiohttp.ClientTimeout):
        async with session.get(url, timeout=timeout) as response:
            body = await response.read()
            if response.status != 200:
                # Error pages are not guaranteed to be valid UTF-8
                preview = body[:200].decode(errors="replace")
                raise TransportError(
                    f"HTTP {response.status} from {url}, body preview: {preview}"
                )

        # The firmware does not always send an application/json content type,
        # so decode the body ourselves.
        try:
            return json.loads(body)
        except ValueError as exc:
            raise MalformedResponseError(
                f"Expected JSON from {url} but got: {body[:200]!r}"
            ) from exc
