"""Hourly and multi-day power statistics."""

from .aggregate import (
    AggregatedHourStats,
    DailyStats,
    HourAggregate,
    HourBucket,
    HourlyRow,
    HourlyStats,
    MultiDayStats,
    aggregate_days,
    aggregate_to_hourly,
    calculate_median,
    calculate_stddev,
    get_hourly_rows,
)

__all__ = [
    "AggregatedHourStats",
    "DailyStats",
    "HourAggregate",
    "HourBucket",
    "HourlyRow",
    "HourlyStats",
    "MultiDayStats",
    "aggregate_days",
    "aggregate_to_hourly",
    "calculate_median",
    "calculate_stddev",
    "get_hourly_rows",
]
