#!/usr/bin/env python
"""
Export 5-minute power data from the Growatt API.

Outputs:
  - Raw CSV with 5-minute intervals
  - Hourly aggregated CSV
  - Multi-day statistics markdown (when the date range spans multiple days)
  - ASCII graph of hourly production (with --graph)
"""
from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from datetime import date, datetime
from typing import Any, Sequence

from cli.graph import render_ascii_graph
from cli.resolve import build_client, resolve_device_sn
from cli.writers import write_hourly_csv, write_raw_csv, write_stats_markdown
from config.growatt_env import GrowattConfig, print_environment_info
from growatt.client import GrowattClient
from growatt.errors import GrowattError
from growatt.models import DATE_FORMAT, PowerData, parse_power_data
from stats.aggregate import DailyStats, aggregate_days, aggregate_to_hourly


def parse_date_arg(value: str, label: str = "") -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise ValueError(
            f"invalid {label}date format: {value!r} (use YYYY-MM-DD)"
        ) from e


def determine_date_range(args: argparse.Namespace) -> tuple[date, date]:
    if args.when == "today":
        start = date.today()
        end = start
    elif args.date:
        start = parse_date_arg(args.date)
        end = start
    elif args.from_date and args.to_date:
        start = parse_date_arg(args.from_date, "from ")
        end = parse_date_arg(args.to_date, "to ")
    else:
        raise ValueError("must specify 'today', --date, or --from/--to")

    if end < start:
        raise ValueError("end date cannot be before start date")

    return start, end


def output_filenames(
    output: str, start: date, end: date
) -> tuple[str, str, str | None]:
    """Return the raw CSV, hourly CSV and stats markdown paths (no stats for one day)."""
    if start == end:
        suffix = start.strftime(DATE_FORMAT)
        stats_file = None
    else:
        suffix = f"{start.strftime(DATE_FORMAT)}_to_{end.strftime(DATE_FORMAT)}"
        stats_file = os.path.join(output, f"stats_{suffix}.md")

    return (
        os.path.join(output, f"power_{suffix}.csv"),
        os.path.join(output, f"hourly_{suffix}.csv"),
        stats_file,
    )


def fetch_power_data(
    client: GrowattClient, device_sn: str, start: date, end: date, timezone: str
) -> list[PowerData]:
    """Fetch the range day by day; Ctrl-C stops after the day in progress."""
    cancel_event = threading.Event()

    def _on_interrupt(signum: int, frame: Any) -> None:
        print("\nInterrupted, stopping after the current day...", file=sys.stderr)
        cancel_event.set()

    previous_handler = signal.signal(signal.SIGINT, _on_interrupt)
    try:
        return client.get_min_inverter_history_range(
            device_sn, start, end, timezone, cancel_event=cancel_event
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)


def build_daily_stats(power_data: Sequence[PowerData]) -> list[DailyStats]:
    daily_stats: list[DailyStats] = []
    for day_data in power_data:
        day_stats = aggregate_to_hourly(parse_power_data(day_data))
        if day_stats is not None:
            daily_stats.append(day_stats)
    return daily_stats


def export(args: argparse.Namespace) -> int:
    config = GrowattConfig.default_config()
    start, end = determine_date_range(args)

    with build_client(args.token, args.base_url, config) as client:
        device_sn = resolve_device_sn(client, args.device_sn, args.plant_id, config)
        timezone = args.timezone or config.get_timezone()

        os.makedirs(args.output, exist_ok=True)

        print(f"Fetching power data for device {device_sn} from {start} to {end}...")
        power_data = fetch_power_data(client, device_sn, start, end, timezone)

    if len(power_data) == 0:
        raise ValueError("no data returned")

    raw_csv_file, hourly_csv_file, stats_file = output_filenames(
        args.output, start, end
    )

    write_raw_csv(raw_csv_file, power_data)
    print(f"Wrote raw data to {raw_csv_file}")

    daily_stats = build_daily_stats(power_data)

    write_hourly_csv(hourly_csv_file, daily_stats)
    print(f"Wrote hourly data to {hourly_csv_file}")

    if args.graph and daily_stats:
        print()
        print(render_ascii_graph(daily_stats))

    if args.save_image and daily_stats:
        from cli.plotting import save_hourly_plot

        image_file = os.path.splitext(hourly_csv_file)[0] + ".png"
        save_hourly_plot(daily_stats, save_path=image_file)
        print(f"Hourly plot saved as {image_file}")

    if len(daily_stats) > 1 and stats_file is not None:
        multi_day = aggregate_days(daily_stats)
        if multi_day is not None:
            write_stats_markdown(stats_file, multi_day, daily_stats)
            print(f"Wrote statistics to {stats_file}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="growatt-export",
        description="Export 5-minute interval power data from the Growatt API",
        epilog=(
            "Examples:\n"
            "  growatt-export today\n"
            "  growatt-export --graph today\n"
            "  growatt-export --date=2025-02-01\n"
            "  growatt-export --from=2025-01-01 --to=2025-01-31 -g"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "when",
        nargs="?",
        choices=["today"],
        help="Export today's data",
    )
    parser.add_argument(
        "--plant-id",
        type=str,
        default=None,
        help="Plant ID (auto-detected if only one plant, or set GROWATT_PLANT_ID)",
    )
    parser.add_argument(
        "--device-sn",
        type=str,
        default=None,
        help="Device serial number for MIN/TLX inverters (or set GROWATT_DEVICE_SN)",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="Timezone for device queries (default: US/Central, or set GROWATT_TIMEZONE)",
    )
    parser.add_argument(
        "--from", dest="from_date", type=str, help="Start date (YYYY-MM-DD)"
    )
    parser.add_argument("--to", dest="to_date", type=str, help="End date (YYYY-MM-DD)")
    parser.add_argument("--date", type=str, help="Single date (YYYY-MM-DD)")
    parser.add_argument(
        "--output", type=str, default=".", help="Output directory (default: .)"
    )
    parser.add_argument(
        "--token", type=str, default=None, help="API token (overrides GROWATT_API_KEY)"
    )
    parser.add_argument("--base-url", type=str, default=None, help="API base URL")
    parser.add_argument(
        "-g",
        "--graph",
        action="store_true",
        default=False,
        help="Display ASCII graph of hourly power production",
    )
    parser.add_argument(
        "--save-image",
        action="store_true",
        default=False,
        help="Save a PNG chart of hourly production next to the hourly CSV",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        default=False,
        help="Print the resolved configuration and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log API requests",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main function of the export tool."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s - %(levelname)s - %(message)s"
        )

    if args.show_config:
        print_environment_info()
        return 0

    try:
        return export(args)
    except (GrowattError, LookupError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
