"""Config flow for AirGradient Local integration."""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional
import homeassistant.helpers.config_validation as cv
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    CONF_NAME,
    CONF_POLL_INTERVAL,
    CONF_SERIAL_NUMBER,
    DEFAULT_NAME,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
    MIN_POLL_INTERVAL,
)
from .locator import serial_from_service_name

poll_interval = vol.All(vol.Coerce(int), vol.Range(min=MIN_POLL_INTERVAL))

_LOGGER = logging.getLogger(__name__)


def build_user_schema(defaults: Dict[str, Any]) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(CONF_NAME, default=defaults.get(CONF_NAME, DEFAULT_NAME)): cv.string,
            vol.Required(CONF_SERIAL_NUMBER, default=defaults.get(CONF_SERIAL_NUMBER, '')): cv.string,
            vol.Required(CONF_POLL_INTERVAL, default=defaults.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)): poll_interval,
        }
    )


def build_options_schema(defaults: Dict[str, Any]) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(CONF_NAME, default=defaults[CONF_NAME]): cv.string,
            vol.Required(CONF_POLL_INTERVAL, default=defaults[CONF_POLL_INTERVAL]): poll_interval,
        }
    )


class AirGradientFlow(config_entries.ConfigFlow, domain=DOMAIN):
    data: Optional[Dict[str, Any]]

    async def async_step_user(self, user_input: Optional[Dict[str, Any]] = None):
        errors: Dict[str, str] = {}
        if user_input is not None:
            self.data = dict(user_input)
            self.data[CONF_NAME] = self.data.get(CONF_NAME, '').strip()
            self.data[CONF_SERIAL_NUMBER] = self.data.get(CONF_SERIAL_NUMBER, '').strip()
            if not self.data[CONF_NAME]:
                errors['base'] = 'name_required'
            if not self.data[CONF_SERIAL_NUMBER]:
                errors['base'] = 'serial_number_required'
            if not errors:
                # One entry per physical device
                await self.async_set_unique_id(self.data[CONF_SERIAL_NUMBER])
                self._abort_if_unique_id_configured()
                _LOGGER.debug("Creating entry for AirGradient %s", self.data[CONF_SERIAL_NUMBER])
                return self.async_create_entry(title=self.data[CONF_NAME], data=self.data)

        return self.async_show_form(
            step_id="user",
            data_schema=build_user_schema(user_input or {}),
            errors=errors,
        )

    async def async_step_zeroconf(self, discovery_info):
        """Prefill the user form from an advertised AirGradient service."""
        serial_number = serial_from_service_name(discovery_info.name)
        if serial_number is None:
            return self.async_abort(reason="not_airgradient_device")

        await self.async_set_unique_id(serial_number)
        self._abort_if_unique_id_configured()
        self.context["title_placeholders"] = {CONF_SERIAL_NUMBER: serial_number}
        _LOGGER.debug("Discovered AirGradient %s via zeroconf", serial_number)
        return self.async_show_form(
            step_id="user",
            data_schema=build_user_schema({CONF_SERIAL_NUMBER: serial_number}),
            errors={},
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow for this handler."""
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handles options flow for the component."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        self._entry = config_entry

    def _defaults(self) -> Dict[str, Any]:
        defaults = {
            CONF_NAME: self._entry.data.get(CONF_NAME, DEFAULT_NAME),
            CONF_POLL_INTERVAL: self._entry.data.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
        }
        for key in defaults:
            if key in self._entry.options:
                defaults[key] = self._entry.options[key]
        return defaults

    async def async_step_init(
        self, user_input: Dict[str, Any] = None
    ) -> Dict[str, Any]:
        errors: Dict[str, str] = {}

        if user_input is not None:
            name = user_input.get(CONF_NAME, '').strip()
            if not name:
                errors['base'] = 'name_required'
            if not errors:
                # The update listener in __init__.py reloads the entry with the new options
                return self.async_create_entry(
                    title=name,
                    data={CONF_NAME: name, CONF_POLL_INTERVAL: user_input[CONF_POLL_INTERVAL]},
                )

        return self.async_show_form(
            step_id="init",
            data_schema=build_options_schema(self._defaults()),
            errors=errors,
        )
