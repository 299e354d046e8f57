from __future__ import annotations

import os

from config.growatt_env import ENV_DEVICE_SN, ENV_PLANT_ID, GrowattConfig
from growatt.client import DEFAULT_BASE_URL, GrowattClient
from growatt.errors import NoTokenError


def build_client(
    token: str | None, base_url: str | None, config: GrowattConfig
) -> GrowattClient:
    """Create a client from CLI flags, falling back to environment and config file."""
    token = token or config.get_token()
    if not token:
        raise NoTokenError()

    return GrowattClient(
        token,
        base_url=base_url or config.get_base_url() or DEFAULT_BASE_URL,
        rate_limit=config.get_rate_limit_seconds(),
    )


def resolve_plant_id(
    client: GrowattClient,
    flag_value: str | None,
    config: GrowattConfig | None = None,
    show_tips: bool = True,
) -> str:
    """
    Determine the plant ID to use.

    Priority: CLI flag > environment variable > config file > auto-detect.
    Auto-detection only succeeds when the account has exactly one plant.
    """
    if flag_value:
        return flag_value

    env_value = os.getenv(ENV_PLANT_ID)
    if env_value:
        print(f"Using plant ID from {ENV_PLANT_ID}: {env_value}")
        return env_value

    if config is not None and config.plant_id:
        print(f"Using plant ID from config file: {config.plant_id}")
        return config.plant_id

    print("No plant ID specified, checking available plants...")
    plants = client.list_plants()

    if len(plants) == 0:
        raise LookupError("no plants found for this account")

    if len(plants) == 1:
        plant_id = plants[0].plant_id
        print(f"Auto-detected plant: {plants[0].plant_name} ({plant_id})")
        if show_tips:
            print()
            print("Tip: To avoid rate limits from auto-detection, set your plant ID:")
            print(f"  export {ENV_PLANT_ID}={plant_id}")
            print()
        return plant_id

    print("\nMultiple plants found:")
    for p in plants:
        print(f"  - {p.plant_name} (ID: {p.plant_id})")
    print()
    print("Set one of these as your default:")
    print(f"  export {ENV_PLANT_ID}=<plant-id>")
    raise LookupError(
        f"multiple plants found; specify --plant-id or set {ENV_PLANT_ID} environment variable"
    )


def resolve_device_sn(
    client: GrowattClient,
    device_flag: str | None,
    plant_flag: str | None,
    config: GrowattConfig | None = None,
) -> str:
    """Determine the inverter serial number, auto-detecting it through the plant."""
    if device_flag:
        return device_flag

    env_value = os.getenv(ENV_DEVICE_SN)
    if env_value:
        print(f"Using device SN from {ENV_DEVICE_SN}: {env_value}")
        return env_value

    if config is not None and config.device_sn:
        print(f"Using device SN from config file: {config.device_sn}")
        return config.device_sn

    # The combined tip below covers the plant ID as well
    plant_id = resolve_plant_id(client, plant_flag, config, show_tips=False)

    print("Fetching device list...")
    devices = client.list_devices(plant_id)

    if len(devices) == 0:
        raise LookupError(f"no devices found for plant {plant_id}")

    if len(devices) == 1:
        sn = devices[0].device_sn
        print(f"Auto-detected device: {devices[0].device_name} ({sn})")
        print()
        print("Tip: To avoid rate limits from auto-detection, set these environment variables:")
        print(f"  export {ENV_PLANT_ID}={plant_id}")
        print(f"  export {ENV_DEVICE_SN}={sn}")
        print()
        return sn

    print("\nMultiple devices found:")
    for d in devices:
        print(f"  - {d.device_name} (SN: {d.device_sn}, Type: {d.device_type})")
    print()
    print("Set one of these as your default:")
    print(f"  export {ENV_DEVICE_SN}=<device-sn>")
    raise LookupError(
        f"multiple devices found; specify --device-sn or set {ENV_DEVICE_SN} environment variable"
    )
