"""Growatt OpenAPI client package."""

from .client import GrowattClient, check_response, parse_response
from .errors import (
    APIError,
    FetchCancelledError,
    GrowattError,
    NoTokenError,
    RangeFetchError,
    is_permission_denied,
    is_plant_not_found,
    is_rate_limited,
)
from .models import (
    Device,
    ParsedPowerData,
    Plant,
    PowerData,
    PowerDataPoint,
    TimeUnit,
    parse_power_data,
)

__all__ = [
    "GrowattClient",
    "check_response",
    "parse_response",
    "APIError",
    "FetchCancelledError",
    "GrowattError",
    "NoTokenError",
    "RangeFetchError",
    "is_permission_denied",
    "is_plant_not_found",
    "is_rate_limited",
    "Device",
    "ParsedPowerData",
    "Plant",
    "PowerData",
    "PowerDataPoint",
    "TimeUnit",
    "parse_power_data",
]
