from __future__ import annotations

import math
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from cli.graph import hourly_average_kwh
from stats.aggregate import HOURS_PER_DAY, DailyStats


def hourly_peak_watts(daily_stats: Sequence[DailyStats]) -> list[float]:
    """Highest reading per hour of day across days; 0 for hours without readings."""
    peaks = [-math.inf] * HOURS_PER_DAY
    for day in daily_stats:
        for h in day.hours:
            if h.samples > 0 and h.max > peaks[h.hour]:
                peaks[h.hour] = h.max

    return [0.0 if peak == -math.inf else peak for peak in peaks]


def save_hourly_plot(
    daily_stats: Sequence[DailyStats], save_path: str = "hourly.png"
) -> None:
    """Save a bar chart of average energy per hour of day with a peak power line."""
    hours = list(range(HOURS_PER_DAY))
    hourly_kwh = hourly_average_kwh(daily_stats)

    max_watts = hourly_peak_watts(daily_stats)

    fig, ax1 = plt.subplots(figsize=(12, 8))
    ax1.bar(hours, hourly_kwh, color="#FFB300", label="Average Energy (kWh)")
    ax1.set_ylabel("Energy (kWh)")
    ax1.set_xlabel("Hour of day")
    ax1.set_xticks(hours)

    ax2 = ax1.twinx()
    ax2.plot(
        hours,
        max_watts,
        color="tab:red",
        label="Peak Power (W)",
        linewidth=2,
    )
    ax2.set_ylabel("Peak Power (W)", color="tab:red")
    ax2.tick_params(axis="y", labelcolor="tab:red")

    if len(daily_stats) == 1:
        title = f"Power Production - {daily_stats[0].date}"
    else:
        title = (
            f"Power Production - {daily_stats[0].date} to {daily_stats[-1].date} "
            f"({len(daily_stats)} days averaged)"
        )
    ax1.set_title(title)

    fig.legend(loc="upper left", bbox_to_anchor=(0.1, 0.9))
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close(fig)
