"""Pure aggregate statistics over decoded entity records.

Sums, means, extremes and medians use exact ``int`` arithmetic. Means are
integer divisions truncated toward zero. Floats appear only in display rates,
which are rounded to two decimals and never fed back into further arithmetic.
Every function accepts an empty input and returns a zero or ``None`` result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from paymaster_data.numeric.codec import decode

LOG = logging.getLogger("paymaster_data.analytics")

Record = Mapping[str, object]

SECONDS_PER_DAY = 86_400
DISPLAY_PRECISION = 2
DATE_FORMAT = "%Y-%m-%d"


def field_value(record: Record, name: str) -> int:
    """
    Return ``record[name]`` as an ``int``; missing or ``None`` values count as zero.

    Returns
    -------
    int
        Exact integer value of the field.
    """
    value = record.get(name)
    if value is None:
        return 0
    return decode(value)


def truncating_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero; a zero denominator yields zero."""
    if denominator == 0:
        return 0
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def total(records: Iterable[Record], name: str) -> int:
    """Sum of one numeric field."""
    return sum((field_value(record, name) for record in records), 0)


def mean(records: Sequence[Record], name: str) -> int:
    """Truncated integer mean of one numeric field; zero for an empty input."""
    return truncating_div(total(records, name), len(records))


def minimum(records: Iterable[Record], name: str) -> int | None:
    """Smallest value of one numeric field, or ``None`` when empty."""
    values = [field_value(record, name) for record in records]
    return min(values) if values else None


def maximum(records: Iterable[Record], name: str) -> int | None:
    """Largest value of one numeric field, or ``None`` when empty."""
    values = [field_value(record, name) for record in records]
    return max(values) if values else None


def median(values: Iterable[int]) -> int | None:
    """
    Return the median of ``values`` after a full sort.

    Even-length inputs select the lower-middle element (index ``(n - 1) // 2``), so
    the median of ``[1, 2, 3, 4]`` is ``2``.

    Returns
    -------
    int | None
        Median value, or ``None`` for an empty input.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    return ordered[(len(ordered) - 1) // 2]


def median_of(records: Iterable[Record], name: str) -> int | None:
    """Median of one numeric field across records."""
    return median(field_value(record, name) for record in records)


def peak[R: Record](records: Iterable[R], name: str) -> R | None:
    """
    Return the record with the largest value of ``name``.

    Ties keep the earliest record.

    Returns
    -------
    R | None
        The peak record, or ``None`` for an empty input.
    """
    best: R | None = None
    best_value = 0
    for record in records:
        value = field_value(record, name)
        if best is None or value > best_value:
            best = record
            best_value = value
    return best


def _identity_value(record: Record, path: str) -> object:
    current: object = record
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def unique_count(records: Iterable[Record], *names: str) -> int:
    """
    Count distinct values of one or more identity fields.

    Dotted names reach into nested records (``"pool.id"``). With several names the
    distinct tuples are counted.

    Returns
    -------
    int
        Number of distinct values, independent of input order.
    """
    seen = {tuple(_identity_value(record, name) for name in names) for record in records}
    return len(seen)


def count_where(records: Iterable[Record], predicate: Callable[[Record], bool]) -> int:
    """Number of records satisfying ``predicate``."""
    return sum(1 for record in records if predicate(record))


def rate(part: int, whole: int) -> float:
    """Percentage ``part / whole`` rounded for display; zero when ``whole`` is zero."""
    if whole == 0:
        return 0.0
    return round(part / whole * 100, DISPLAY_PRECISION)


def ratio(numerator: int, denominator: int) -> float:
    """Plain ratio rounded for display; zero when the denominator is zero."""
    if denominator == 0:
        return 0.0
    return round(numerator / denominator, DISPLAY_PRECISION)


def percentage_change(current: int, previous: int) -> float | None:
    """
    Growth from ``previous`` to ``current`` in percent, rounded for display.

    Returns
    -------
    float | None
        ``None`` when ``previous`` is zero and ``current`` is positive (unbounded
        growth), ``0.0`` when both are zero.
    """
    if previous == 0:
        return None if current > 0 else 0.0
    return round((current - previous) / previous * 100, DISPLAY_PRECISION)


def utc_datetime(timestamp: object) -> datetime | None:
    """
    Aware UTC datetime of a unix timestamp.

    Returns
    -------
    datetime | None
        ``None`` when the timestamp lies outside the representable range; the
        value is logged as a warning.
    """
    seconds = decode(timestamp)
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, ValueError, OSError):
        LOG.warning("Timestamp %s is out of range; ignoring it", seconds)
        return None


def utc_date(timestamp: object) -> str | None:
    """Calendar date (``YYYY-MM-DD``, UTC) of a unix timestamp, ``None`` when out of range."""
    moment = utc_datetime(timestamp)
    return None if moment is None else moment.strftime(DATE_FORMAT)


def group_by_day[R: Record](records: Iterable[R], timestamp_field: str) -> dict[str, list[R]]:
    """
    Bucket records by the UTC calendar date of ``timestamp_field``.

    Records whose timestamp cannot be placed on a calendar day are left out.

    Returns
    -------
    dict[str, list[R]]
        Buckets keyed by date, in ascending date order.
    """
    buckets: dict[str, list[R]] = {}
    for record in records:
        date = utc_date(record.get(timestamp_field, 0))
        if date is None:
            continue
        buckets.setdefault(date, []).append(record)
    return dict(sorted(buckets.items()))


@dataclass(frozen=True)
class DailyBucket:
    """Statistics for the records of one calendar day."""

    date: str
    count: int
    total: int
    average: int
    unique: dict[str, int] = field(default_factory=dict)


def daily_rollup(
    records: Iterable[Record],
    *,
    timestamp_field: str,
    value_field: str,
    unique_fields: Sequence[str] = (),
) -> list[DailyBucket]:
    """
    Per-day rollup: count, sum and truncated mean of ``value_field``.

    Each bucket derives its own unique counts for ``unique_fields``.

    Returns
    -------
    list[DailyBucket]
        One bucket per day that has records, ascending by date.
    """
    rollup: list[DailyBucket] = []
    for date, bucket in group_by_day(records, timestamp_field).items():
        bucket_total = total(bucket, value_field)
        rollup.append(
            DailyBucket(
                date=date,
                count=len(bucket),
                total=bucket_total,
                average=truncating_div(bucket_total, len(bucket)),
                unique={name: unique_count(bucket, name) for name in unique_fields},
            )
        )
    return rollup
