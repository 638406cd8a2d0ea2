DOMAIN = "airgradient_local"
VERSION = "0.1.0"
MANUFACTURER = "AirGradient"

# Config entry keys
CONF_NAME = "name"
CONF_SERIAL_NUMBER = "serial_number"
CONF_POLL_INTERVAL = "poll_interval"

DEFAULT_NAME = "AirGradient"
DEFAULT_POLL_INTERVAL = 30   # seconds
MIN_POLL_INTERVAL = 5        # seconds, must stay above a typical fetch round trip

# Discovery
SERVICE_TYPE = "_airgradient._tcp.local."
SERVICE_NAME_PREFIX = "airgradient_"
DISCOVERY_TIMEOUT = 5        # seconds until the one-shot "device not found" report
RESOLVE_TIMEOUT_MS = 3000    # zeroconf service info request timeout

# Telemetry
MEASURES_PATH = "/measures/current"
REQUEST_TIMEOUT = 5          # seconds, capped at half the poll interval by the monitor
