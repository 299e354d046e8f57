from __future__ import annotations

import os
import sys
from datetime import date

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from cli.plotting import hourly_peak_watts, save_hourly_plot
from stats.aggregate import HOURS_PER_DAY, DailyStats, HourBucket


def _day(day: date, noon_power: float) -> DailyStats:
    stats = []
    for hour in range(HOURS_PER_DAY):
        bucket = HourBucket(hour)
        if hour == 12:
            bucket.add(noon_power)
        stats.append(bucket.finalize())
    return DailyStats(date=day, hours=tuple(stats))


class TestSaveHourlyPlot:
    def test_single_day_png(self, tmp_path):
        save_path = tmp_path / "hourly.png"

        save_hourly_plot([_day(date(2025, 2, 1), 4500.0)], save_path=str(save_path))

        assert save_path.exists()
        assert save_path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_multi_day_png(self, tmp_path):
        save_path = tmp_path / "range.png"
        days = [_day(date(2025, 1, 1), 4000.0), _day(date(2025, 1, 2), 4200.0)]

        save_hourly_plot(days, save_path=str(save_path))

        assert save_path.stat().st_size > 0


class TestHourlyPeakWatts:
    def test_negative_only_hour_keeps_its_peak(self):
        days = [_day(date(2025, 1, 1), -30.0), _day(date(2025, 1, 2), -10.0)]

        peaks = hourly_peak_watts(days)

        assert peaks[12] == -10.0
        assert peaks[0] == 0.0
        assert len(peaks) == HOURS_PER_DAY

    def test_highest_reading_across_days(self):
        days = [_day(date(2025, 1, 1), 4000.0), _day(date(2025, 1, 2), 4700.0)]
        assert hourly_peak_watts(days)[12] == 4700.0
