"""Aggregate statistics and display formatting over decoded records."""

from __future__ import annotations

from paymaster_data.analytics.aggregators import (
    DailyBucket,
    count_where,
    daily_rollup,
    group_by_day,
    maximum,
    mean,
    median,
    median_of,
    minimum,
    peak,
    percentage_change,
    rate,
    total,
    unique_count,
)
from paymaster_data.analytics.formatting import (
    format_currency,
    format_date,
    format_datetime,
    format_gas,
    format_percentage_change,
    format_units,
)

__all__ = [
    "DailyBucket",
    "count_where",
    "daily_rollup",
    "format_currency",
    "format_date",
    "format_datetime",
    "format_gas",
    "format_percentage_change",
    "format_units",
    "group_by_day",
    "maximum",
    "mean",
    "median",
    "median_of",
    "minimum",
    "peak",
    "percentage_change",
    "rate",
    "total",
    "unique_count",
]
