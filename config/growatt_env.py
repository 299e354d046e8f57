#!/usr/bin/env python3
from __future__ import annotations

import json
import os
from typing import Any, Final

# Environment variables
ENV_API_KEY: Final[str] = "GROWATT_API_KEY"
ENV_BASE_URL: Final[str] = "GROWATT_BASE_URL"
ENV_PLANT_ID: Final[str] = "GROWATT_PLANT_ID"
ENV_DEVICE_SN: Final[str] = "GROWATT_DEVICE_SN"
ENV_TIMEZONE: Final[str] = "GROWATT_TIMEZONE"
ENV_CONFIG_PATH: Final[str] = "GROWATT_CONFIG"

DEFAULT_CONFIG_PATH: Final[str] = os.path.join(
    os.path.dirname(__file__), "growatt_config.json"
)
DEFAULT_TIMEZONE: Final[str] = "US/Central"
DEFAULT_RATE_LIMIT_SECONDS: Final[float] = 3.0


def get_config_path() -> str:
    """Get the config file path, honouring the GROWATT_CONFIG override"""
    return os.getenv(ENV_CONFIG_PATH) or DEFAULT_CONFIG_PATH


class GrowattConfig:
    """Settings for the Growatt tools.

    Values set in the environment take precedence over the JSON config file.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        plant_id: str | None = None,
        device_sn: str | None = None,
        timezone: str | None = None,
        rate_limit_seconds: float = DEFAULT_RATE_LIMIT_SECONDS,
    ) -> None:
        self.token: str | None = token
        self.base_url: str | None = base_url
        self.plant_id: str | None = plant_id
        self.device_sn: str | None = device_sn
        self.timezone: str | None = timezone
        self.rate_limit_seconds: float = rate_limit_seconds

    def get_token(self) -> str | None:
        return os.getenv(ENV_API_KEY) or self.token

    def get_base_url(self) -> str | None:
        return os.getenv(ENV_BASE_URL) or self.base_url

    def get_plant_id(self) -> str | None:
        return os.getenv(ENV_PLANT_ID) or self.plant_id

    def get_device_sn(self) -> str | None:
        return os.getenv(ENV_DEVICE_SN) or self.device_sn

    def get_timezone(self) -> str:
        return os.getenv(ENV_TIMEZONE) or self.timezone or DEFAULT_TIMEZONE

    def get_rate_limit_seconds(self) -> float:
        return self.rate_limit_seconds

    @staticmethod
    def default_config(config_path: str | None = None) -> GrowattConfig:
        """Load configuration from the config file, falling back to defaults."""
        if config_path is None:
            config_path = get_config_path()

        if not os.path.exists(config_path):
            return GrowattConfig()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data: dict[str, Any] = json.load(f)

            return GrowattConfig(
                token=config_data.get("token"),
                base_url=config_data.get("base_url"),
                plant_id=_optional_str(config_data.get("plant_id")),
                device_sn=_optional_str(config_data.get("device_sn")),
                timezone=config_data.get("timezone"),
                rate_limit_seconds=float(
                    config_data.get("rate_limit_seconds", DEFAULT_RATE_LIMIT_SECONDS)
                ),
            )
        except (OSError, ValueError, TypeError, AttributeError) as e:
            print(f"Warning: Could not load Growatt config from {config_path}: {e}")
            print("Using fallback default values")
            return GrowattConfig()


def _optional_str(value: Any) -> str | None:
    # IDs are often written as bare numbers in the JSON file
    if value is None:
        return None
    return str(value)


def print_environment_info(config: GrowattConfig | None = None) -> None:
    """Print where each setting currently comes from"""
    if config is None:
        config = GrowattConfig.default_config()

    token = config.get_token()
    print(f"Config File: {get_config_path()}")
    print(f"API token: {'set' if token else 'not set'}")
    print(f"Base URL: {config.get_base_url() or '(default)'}")
    print(f"Plant ID: {config.get_plant_id() or '(auto-detect)'}")
    print(f"Device SN: {config.get_device_sn() or '(auto-detect)'}")
    print(f"Timezone: {config.get_timezone()}")
    print(f"Rate limit: {config.get_rate_limit_seconds():.1f}s between requests")
    print(
        f"Override with: export {ENV_API_KEY}=... {ENV_PLANT_ID}=... {ENV_DEVICE_SN}=..."
    )


if __name__ == "__main__":
    print_environment_info()
