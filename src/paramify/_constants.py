"""Internal constants shared across the library."""

#: Payout threshold applied until the admin sets one (feet).
DEFAULT_FLOOD_THRESHOLD_FEET: float = 12.0
#: Largest threshold the admin may configure (feet).
MAX_FLOOD_THRESHOLD_FEET: float = 100.0

USGS_BASE_URL = "https://waterservices.usgs.gov/nwis/iv/"
#: USGS parameter code for gage height in feet.
USGS_GAGE_HEIGHT_PARAMETER = "00065"
USGS_SOURCE_LABEL = "USGS Water Data"

DEFAULT_UPDATE_INTERVAL_SECONDS = 300
MIN_UPDATE_INTERVAL_SECONDS = 60
DEFAULT_MAX_RETRIES = 3

MAX_RESPONSE_BYTES = 10_000
#: Fixed budget charged for every outbound HTTP call, successful or not.
HTTP_OUTCALL_CYCLES = 20_000_000_000


def format_flood_level(level: float) -> str:
    """Render a water level for log lines, e.g. ``"12.00 ft"``."""
    return f"{level:.2f} ft"
