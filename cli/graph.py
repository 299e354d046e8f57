from __future__ import annotations

from typing import Sequence

from stats.aggregate import HOURS_PER_DAY, DailyStats

GRAPH_HEIGHT = 15
BAR_WIDTH = 2


def hourly_average_kwh(daily_stats: Sequence[DailyStats]) -> list[float]:
    """Average energy per hour of day, counting only days with readings in that hour."""
    hourly_kwh = [0.0] * HOURS_PER_DAY
    hourly_counts = [0] * HOURS_PER_DAY

    for day in daily_stats:
        for h in day.hours:
            if h.samples > 0:
                # Average watts held for one hour
                hourly_kwh[h.hour] += h.mean / 1000.0
                hourly_counts[h.hour] += 1

    for hour in range(HOURS_PER_DAY):
        if hourly_counts[hour] > 0:
            hourly_kwh[hour] /= hourly_counts[hour]

    return hourly_kwh


def render_ascii_graph(daily_stats: Sequence[DailyStats]) -> str:
    """Render an ASCII bar chart of hourly production."""
    hourly_kwh = hourly_average_kwh(daily_stats)

    max_kwh = max(hourly_kwh)
    if max_kwh == 0:
        return "No power data to graph."

    total_kwh = sum(hourly_kwh)

    lines: list[str] = []
    if len(daily_stats) == 1:
        lines.append(
            f"Power Production - {daily_stats[0].date} (Total: {total_kwh:.2f} kWh)"
        )
    else:
        lines.append(
            f"Power Production - {len(daily_stats)} days averaged (Daily avg: {total_kwh:.2f} kWh)"
        )
    lines.append("")

    for row in range(GRAPH_HEIGHT, 0, -1):
        threshold = max_kwh * row / GRAPH_HEIGHT

        if row == GRAPH_HEIGHT:
            label = f"{max_kwh:5.2f} |"
        elif row == GRAPH_HEIGHT // 2 + 1:
            label = f"{max_kwh / 2:5.2f} |"
        elif row == 1:
            label = f"{max_kwh / GRAPH_HEIGHT:5.2f} |"
        else:
            label = "      |"

        bars = "".join(
            ("#" if kwh >= threshold else " ") * BAR_WIDTH for kwh in hourly_kwh
        )
        lines.append(label + bars)

    lines.append("      +" + "-" * (HOURS_PER_DAY * BAR_WIDTH))
    lines.append(
        "       " + "".join(f"{hour:<6d}" for hour in range(0, HOURS_PER_DAY, 3))
    )
    lines.append("       Hour of day")
    lines.append("")
    lines.append("kWh")

    return "\n".join(lines)
