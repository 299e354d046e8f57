from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Sequence

import numpy as np

from growatt.models import ParsedPowerData

HOURS_PER_DAY = 24


@dataclass(frozen=True)
class HourlyStats:
    """Statistics for a single clock hour of one day."""

    hour: int
    samples: int
    min: float
    max: float
    sum: float
    mean: float
    stddev: float
    values: tuple[float, ...]


@dataclass(frozen=True)
class DailyStats:
    date: date
    hours: tuple[HourlyStats, ...]  # always 24 entries, index == hour


@dataclass(frozen=True)
class AggregatedHourStats:
    """Statistics for one hour of the day across several days.

    min/max are the extremes of the raw readings, while average, median and
    stddev are computed over the per-day hourly means stored in ``values``.
    """

    hour: int
    sample_days: int
    min: float
    max: float
    average: float
    median: float
    stddev: float
    values: tuple[float, ...]


@dataclass(frozen=True)
class MultiDayStats:
    start_date: date
    end_date: date
    days_analyzed: int
    by_hour: tuple[AggregatedHourStats, ...]
    total_production_kwh: float
    daily_average_kwh: float
    peak_hour: int
    peak_power_avg: float


@dataclass(frozen=True)
class HourlyRow:
    date: date
    hour: int
    min: float
    max: float
    avg: float
    samples: int


def calculate_stddev(values: Sequence[float], mean: float) -> float:
    """Sample standard deviation (n - 1 denominator), 0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0

    arr = np.asarray(values, dtype=float)
    return float(np.sqrt(np.sum((arr - mean) ** 2) / (len(arr) - 1)))


def calculate_median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=float)))


class HourBucket:
    """Accumulates the power readings of one hour, then finalizes them."""

    def __init__(self, hour: int) -> None:
        self.hour = hour
        self.samples = 0
        self.min = math.inf
        self.max = -math.inf
        self.sum = 0.0
        self.values: list[float] = []
        self._finalized = False

    def add(self, power: float) -> None:
        if self._finalized:
            raise RuntimeError(f"hour {self.hour} bucket is already finalized")

        self.samples += 1
        self.sum += power
        self.values.append(power)

        if power < self.min:
            self.min = power
        if power > self.max:
            self.max = power

    def finalize(self) -> HourlyStats:
        if self._finalized:
            raise RuntimeError(f"hour {self.hour} bucket is already finalized")
        self._finalized = True

        if self.samples == 0:
            return HourlyStats(
                hour=self.hour,
                samples=0,
                min=0.0,
                max=0.0,
                sum=0.0,
                mean=0.0,
                stddev=0.0,
                values=(),
            )

        mean = self.sum / self.samples
        return HourlyStats(
            hour=self.hour,
            samples=self.samples,
            min=self.min,
            max=self.max,
            sum=self.sum,
            mean=mean,
            stddev=calculate_stddev(self.values, mean),
            values=tuple(self.values),
        )


class HourAggregate:
    """Folds the same hour from several days into one AggregatedHourStats."""

    def __init__(self, hour: int) -> None:
        self.hour = hour
        self.sample_days = 0
        self.min = math.inf
        self.max = -math.inf
        self.means: list[float] = []
        self._finalized = False

    def add_day(self, hour_stats: HourlyStats) -> None:
        if self._finalized:
            raise RuntimeError(f"hour {self.hour} aggregate is already finalized")
        # Idle hours must not pull the minimum toward zero
        if hour_stats.samples == 0:
            return

        self.sample_days += 1
        if hour_stats.min < self.min:
            self.min = hour_stats.min
        if hour_stats.max > self.max:
            self.max = hour_stats.max
        self.means.append(hour_stats.mean)

    def finalize(self) -> AggregatedHourStats:
        if self._finalized:
            raise RuntimeError(f"hour {self.hour} aggregate is already finalized")
        self._finalized = True

        if self.sample_days == 0:
            return AggregatedHourStats(
                hour=self.hour,
                sample_days=0,
                min=0.0,
                max=0.0,
                average=0.0,
                median=0.0,
                stddev=0.0,
                values=(),
            )

        average = float(np.mean(self.means))
        return AggregatedHourStats(
            hour=self.hour,
            sample_days=self.sample_days,
            min=self.min,
            max=self.max,
            average=average,
            median=calculate_median(self.means),
            stddev=calculate_stddev(self.means, average),
            values=tuple(self.means),
        )


def aggregate_to_hourly(data: Sequence[ParsedPowerData]) -> DailyStats | None:
    """
    Convert one day of 5-minute power readings into 24 hourly buckets.

    Readings whose hour falls outside 0-23 are dropped. Returns None when the
    input is empty or none of the readings had a usable hour.
    """
    if len(data) == 0:
        return None

    buckets = [HourBucket(hour) for hour in range(HOURS_PER_DAY)]

    accepted = 0
    for point in data:
        if 0 <= point.hour < HOURS_PER_DAY:
            buckets[point.hour].add(point.power)
            accepted += 1

    if accepted == 0:
        return None

    return DailyStats(
        date=data[0].date,
        hours=tuple(bucket.finalize() for bucket in buckets),
    )


def aggregate_days(days: Sequence[DailyStats]) -> MultiDayStats | None:
    """
    Combine hourly statistics from several days.

    The days are expected in chronological order; start and end dates are
    taken from the first and last entries as given.
    """
    if len(days) == 0:
        return None

    aggregates = [HourAggregate(hour) for hour in range(HOURS_PER_DAY)]
    for day in days:
        for hour in range(HOURS_PER_DAY):
            aggregates[hour].add_day(day.hours[hour])

    by_hour = tuple(agg.finalize() for agg in aggregates)

    # First hour to strictly exceed the running maximum wins ties
    max_avg = 0.0
    peak_hour = 0
    peak_power_avg = 0.0
    for hour_stats in by_hour:
        if hour_stats.average > max_avg:
            max_avg = hour_stats.average
            peak_hour = hour_stats.hour
            peak_power_avg = hour_stats.average

    # Each hourly mean is treated as constant power for the whole hour
    total_production = 0.0
    for day in days:
        daily_energy = 0.0
        for hour_stats in day.hours:
            daily_energy += hour_stats.mean / 1000.0
        total_production += daily_energy

    return MultiDayStats(
        start_date=days[0].date,
        end_date=days[-1].date,
        days_analyzed=len(days),
        by_hour=by_hour,
        total_production_kwh=total_production,
        daily_average_kwh=total_production / len(days),
        peak_hour=peak_hour,
        peak_power_avg=peak_power_avg,
    )


def get_hourly_rows(days: Sequence[DailyStats]) -> list[HourlyRow]:
    """Flatten daily statistics into one row per day and hour for CSV export."""
    rows: list[HourlyRow] = []
    for day in days:
        for h in day.hours:
            rows.append(
                HourlyRow(
                    date=day.date,
                    hour=h.hour,
                    min=h.min,
                    max=h.max,
                    avg=h.mean,
                    samples=h.samples,
                )
            )
    return rows
