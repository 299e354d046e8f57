#!/usr/bin/env python
"""
Get the instantaneous power output from a Growatt solar plant.

By default prints a human-readable wattage. Use -j/--json for output suitable
for piping to other programs and -c to poll continuously.

Examples:
  growatt-power
  growatt-power --plant-id=12345
  growatt-power -j
  growatt-power -c              # poll every 60 seconds
  growatt-power -c 30           # poll every 30 seconds
  growatt-power --json | jq .current_power_watts
"""
from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
from datetime import datetime
from typing import Any, Sequence

from cli.resolve import build_client
from config.growatt_env import ENV_PLANT_ID, GrowattConfig
from growatt.client import GrowattClient
from growatt.errors import GrowattError
from growatt.models import Plant

DEFAULT_POLL_INTERVAL = 60  # seconds


def select_plant(plants: Sequence[Plant], plant_id: str | None) -> Plant:
    if len(plants) == 0:
        raise LookupError("no plants found for this account")

    if plant_id:
        for plant in plants:
            if plant.plant_id == plant_id:
                return plant
        raise LookupError(f"plant {plant_id} not found")

    if len(plants) == 1:
        return plants[0]

    print("Multiple plants found:", file=sys.stderr)
    for p in plants:
        print(f"  - {p.plant_name} (ID: {p.plant_id})", file=sys.stderr)
    raise LookupError(
        f"multiple plants found; specify --plant-id or set {ENV_PLANT_ID} environment variable"
    )


def power_output(plant: Plant, include_timestamp: bool = False) -> dict[str, Any]:
    output: dict[str, Any] = {
        "plant_id": plant.plant_id,
        "plant_name": plant.plant_name,
        "current_power_watts": plant.current_power,
        "today_energy_kwh": plant.today_energy,
        "total_energy_kwh": plant.total_energy,
        "peak_power_kw": plant.peak_power,
        "status": plant.status,
    }
    if include_timestamp:
        output["timestamp"] = datetime.now().astimezone().isoformat(timespec="seconds")
    return output


def fetch_and_print(
    client: GrowattClient,
    plant_id: str | None,
    json_output: bool,
    include_timestamp: bool = False,
) -> None:
    """Print the current power of the target plant. The plant list carries live power."""
    plants = client.list_plants()
    plant = select_plant(plants, plant_id)

    if json_output:
        print(json.dumps(power_output(plant, include_timestamp)))
        return

    if include_timestamp:
        print(f"{datetime.now().strftime('%H:%M:%S')}  {plant.current_power:.0f} W")
    else:
        print(f"{plant.current_power:.0f} W")


def run_continuous(
    client: GrowattClient,
    plant_id: str | None,
    json_output: bool,
    interval: float,
    stop_event: threading.Event | None = None,
) -> int:
    """Poll until SIGINT/SIGTERM; fetch errors are reported and polling continues."""
    if stop_event is None:
        stop_event = threading.Event()

    def _on_signal(signum: int, frame: Any) -> None:
        print("\nStopping...", file=sys.stderr)
        stop_event.set()

    previous_sigint = signal.signal(signal.SIGINT, _on_signal)
    previous_sigterm = signal.signal(signal.SIGTERM, _on_signal)
    try:
        while True:
            try:
                fetch_and_print(client, plant_id, json_output, include_timestamp=True)
            except (GrowattError, LookupError) as e:
                print(f"Error: {e}", file=sys.stderr)
            sys.stdout.flush()

            if stop_event.wait(interval):
                return 0
    finally:
        signal.signal(signal.SIGINT, previous_sigint)
        signal.signal(signal.SIGTERM, previous_sigterm)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="growatt-power",
        description="Get current power output from Growatt plant",
    )
    parser.add_argument(
        "--plant-id",
        type=str,
        default=None,
        help="Plant ID (auto-detected if only one plant, or set GROWATT_PLANT_ID)",
    )
    parser.add_argument(
        "--token", type=str, default=None, help="API token (overrides GROWATT_API_KEY)"
    )
    parser.add_argument("--base-url", type=str, default=None, help="API base URL")
    parser.add_argument(
        "-j", "--json", action="store_true", default=False, help="Output as JSON"
    )
    parser.add_argument(
        "-c",
        "--continuous",
        type=int,
        nargs="?",
        const=DEFAULT_POLL_INTERVAL,
        default=0,
        metavar="SECONDS",
        help="Poll continuously every N seconds (default 60 if flag used without value)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main function of the power tool."""
    args = build_parser().parse_args(argv)

    config = GrowattConfig.default_config()
    plant_id = args.plant_id or config.get_plant_id()

    try:
        client = build_client(args.token, args.base_url, config)
    except GrowattError as e:
        print(f"Error: creating client: {e}", file=sys.stderr)
        return 1

    with client:
        if args.continuous > 0:
            return run_continuous(client, plant_id, args.json, args.continuous)

        try:
            fetch_and_print(client, plant_id, args.json)
        except (GrowattError, LookupError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
