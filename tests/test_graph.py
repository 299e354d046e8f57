from __future__ import annotations

import os
import sys
import unittest
from datetime import date

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from cli.graph import BAR_WIDTH, GRAPH_HEIGHT, hourly_average_kwh, render_ascii_graph
from stats.aggregate import HOURS_PER_DAY, DailyStats, HourBucket


def _day(day: date, hours: dict[int, list[float]]) -> DailyStats:
    stats = []
    for hour in range(HOURS_PER_DAY):
        bucket = HourBucket(hour)
        for power in hours.get(hour, []):
            bucket.add(power)
        stats.append(bucket.finalize())
    return DailyStats(date=day, hours=tuple(stats))


class TestHourlyAverage(unittest.TestCase):
    def test_average_only_over_days_with_readings(self) -> None:
        days = [
            _day(date(2025, 1, 1), {12: [4000.0]}),
            _day(date(2025, 1, 2), {12: [5000.0], 13: [2000.0]}),
        ]
        kwh = hourly_average_kwh(days)

        self.assertAlmostEqual(kwh[12], 4.5)
        # Hour 13 only had readings on one day
        self.assertAlmostEqual(kwh[13], 2.0)
        self.assertEqual(kwh[0], 0.0)


class TestAsciiGraph(unittest.TestCase):
    def test_no_power(self) -> None:
        graph = render_ascii_graph([_day(date(2025, 1, 1), {6: [0.0]})])
        self.assertEqual(graph, "No power data to graph.")

    def test_single_day_layout(self) -> None:
        graph = render_ascii_graph([_day(date(2025, 2, 1), {12: [4500.0], 13: [2250.0]})])
        lines = graph.split("\n")

        self.assertEqual(lines[0], "Power Production - 2025-02-01 (Total: 6.75 kWh)")
        self.assertEqual(lines[1], "")

        bars = lines[2 : 2 + GRAPH_HEIGHT]
        self.assertTrue(bars[0].startswith(" 4.50 |"))
        self.assertTrue(bars[-1].startswith(" 0.30 |"))

        top = bars[0][len(" 4.50 |") :]
        self.assertEqual(len(top), HOURS_PER_DAY * BAR_WIDTH)
        self.assertEqual(top[12 * BAR_WIDTH : 13 * BAR_WIDTH], "##")
        self.assertEqual(top.count("#"), BAR_WIDTH)

        bottom = bars[-1][len(" 0.30 |") :]
        self.assertEqual(bottom.count("#"), 2 * BAR_WIDTH)

        self.assertEqual(lines[2 + GRAPH_HEIGHT], "      +" + "-" * (HOURS_PER_DAY * BAR_WIDTH))
        self.assertEqual(lines[-1], "kWh")

    def test_multi_day_title(self) -> None:
        days = [
            _day(date(2025, 1, 1), {12: [4000.0]}),
            _day(date(2025, 1, 2), {12: [5000.0]}),
        ]
        graph = render_ascii_graph(days)
        self.assertTrue(
            graph.startswith("Power Production - 2 days averaged (Daily avg: 4.50 kWh)")
        )


if __name__ == "__main__":
    unittest.main()
