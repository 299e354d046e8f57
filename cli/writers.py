from __future__ import annotations

from typing import Sequence

import pandas as pd

from growatt.models import PowerData
from stats.aggregate import DailyStats, MultiDayStats, get_hourly_rows

RAW_CSV_COLUMNS = ["date", "time", "power_watts"]
HOURLY_CSV_COLUMNS = ["date", "hour", "min_watts", "max_watts", "avg_watts", "samples"]


def write_raw_csv(filename: str, data: Sequence[PowerData]) -> None:
    """Write every 5-minute reading as one CSV row."""
    rows = [
        {"date": day.date, "time": p.time, "power_watts": f"{p.power:.2f}"}
        for day in data
        for p in day.powers
    ]
    df = pd.DataFrame(rows, columns=RAW_CSV_COLUMNS)
    df.to_csv(filename, index=False)


def write_hourly_csv(filename: str, data: Sequence[DailyStats]) -> None:
    """Write the per-day hourly statistics, 24 rows per day."""
    rows = []
    for row in get_hourly_rows(data):
        rows.append(
            {
                "date": row.date.isoformat(),
                "hour": row.hour,
                "min_watts": f"{row.min:.2f}" if row.min > 0 else "0",
                "max_watts": f"{row.max:.2f}",
                "avg_watts": f"{row.avg:.2f}",
                "samples": row.samples,
            }
        )
    df = pd.DataFrame(rows, columns=HOURLY_CSV_COLUMNS)
    df.to_csv(filename, index=False)


def write_stats_markdown(
    filename: str,
    data: MultiDayStats,
    daily_stats: Sequence[DailyStats] | None = None,
) -> None:
    """
    Write the multi-day statistics report.

    When daily_stats is given, the report ends with a table of the hourly
    average power of every day.
    """
    with open(filename, "w", encoding="utf-8") as f:
        f.write("# Power Production Statistics\n\n")
        f.write(f"**Period:** {data.start_date} to {data.end_date}\n")
        f.write(f"**Days Analyzed:** {data.days_analyzed}\n\n")

        f.write("## Summary\n\n")
        f.write("| Metric | Value |\n")
        f.write("|--------|-------|\n")
        f.write(f"| Peak Hour (avg) | {data.peak_hour:02d}:00 |\n")
        f.write(f"| Peak Power (avg) | {data.peak_power_avg:.1f} W |\n")
        f.write(f"| Daily Average Production | {data.daily_average_kwh:.2f} kWh |\n")
        f.write(f"| Total Production | {data.total_production_kwh:.2f} kWh |\n\n")

        f.write("## Hourly Statistics (All Days Combined)\n\n")
        f.write(
            "| Hour | Min (W) | Max (W) | Average (W) | Median (W) | Std Dev | Days |\n"
        )
        f.write(
            "|------|---------|---------|-------------|------------|---------|------|\n"
        )
        for h in data.by_hour:
            f.write(
                f"| {h.hour:02d}:00 | {h.min:.1f} | {h.max:.1f} | {h.average:.1f} "
                f"| {h.median:.1f} | {h.stddev:.1f} | {h.sample_days} |\n"
            )

        f.write("\n## Interpretation Guide\n\n")
        f.write(
            "- **Min/Max**: The lowest and highest instantaneous power readings at this hour across all days\n"
        )
        f.write(
            "- **Average**: Mean power output at this hour across all analyzed days\n"
        )
        f.write(
            "- **Median**: Middle value of hourly averages (less affected by outliers)\n"
        )
        f.write(
            "- **Std Dev**: Standard deviation of hourly averages (variability indicator)\n"
        )
        f.write("- **Days**: Number of days with data at this hour\n\n")

        f.write("## Raw Hourly Averages by Day\n\n")

        active_hours = [h.hour for h in data.by_hour if h.sample_days > 0]
        if not active_hours:
            f.write("*No hourly data recorded in this period.*\n")
            return

        if not daily_stats:
            f.write("*Note: Individual daily data available in the hourly CSV file.*\n")
            return

        f.write(
            "For detailed analysis, the following shows the average power per hour for each day:\n\n"
        )
        f.write("| Day |" + "".join(f" {hour:02d}:00 |" for hour in active_hours) + "\n")
        f.write("|-----|" + "-------|" * len(active_hours) + "\n")
        for day in daily_stats:
            cells = "".join(f" {day.hours[hour].mean:.0f} |" for hour in active_hours)
            f.write(f"| {day.date} |{cells}\n")
