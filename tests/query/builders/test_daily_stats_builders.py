"""Tests for per-pool and network-wide daily statistics queries."""

from __future__ import annotations

import anyio

from paymaster_data.query.builders import (
    AggregatedStats,
    DailyGlobalStatsQueryBuilder,
    DailyPoolStatsQueryBuilder,
    GlobalPeakDay,
    GrowthRates,
    PoolPeakDay,
    PoolUtilizationMetrics,
    UtilizationTrend,
)
from tests._helpers.expect import expect_equal, expect_length, expect_true
from tests._helpers.fakes import RecordingTransport, envelope


def _pool_day(  # noqa: PLR0913
    date: str,
    new_members: int,
    operations: int,
    gas: int,
    revenue: int,
    members: int,
) -> dict[str, object]:
    return {
        "date": date,
        "newMembers": str(new_members),
        "userOperations": str(operations),
        "gasSpent": str(gas),
        "revenueGenerated": str(revenue),
        "totalMembers": str(members),
        "totalDeposits": "1000",
    }


POOL_DAYS = (
    _pool_day("2024-01-01", 2, 10, 100, 50, 10),
    _pool_day("2024-01-02", 3, 30, 200, 70, 13),
    _pool_day("2024-01-03", 1, 20, 300, 30, 14),
)


def test_date_range_filters_are_strings(transport: RecordingTransport) -> None:
    """Calendar dates are compared as strings."""
    rendered = (
        DailyPoolStatsQueryBuilder(transport)
        .by_pool(1)
        .for_date_range("2024-01-01", "2024-01-31")
        .render()
    )
    expect_true("$date_gte: String" in rendered.query, message=rendered.query)
    expect_equal(rendered.variables["date_lte"], "2024-01-31", label="end")
    expect_equal(rendered.variables["poolId"], "1", label="pool")


def test_pool_performance_stats_totals_peak_and_growth() -> None:
    """Performance stats total the run, pick the busiest day and derive growth."""
    fake = RecordingTransport(responses=[envelope("dailyPoolStats", *POOL_DAYS)])
    stats = anyio.run(DailyPoolStatsQueryBuilder(fake).order_by_oldest().get_pool_performance_stats)

    expect_equal(stats.total_days, 3, label="days")
    expect_equal(stats.total_new_members, "6", label="new members")
    expect_equal(stats.total_user_operations, "60", label="operations")
    expect_equal(stats.total_gas_spent, "600", label="gas")
    expect_equal(stats.total_revenue, "150", label="revenue")
    expect_equal(stats.average_new_members, 2.0, label="avg members")
    expect_equal(stats.average_gas_spent, "200", label="avg gas")
    expect_equal(
        stats.peak_day, PoolPeakDay("2024-01-02", "3", "30", "200", "70"), label="peak day"
    )
    expect_equal(stats.growth_rate, GrowthRates(1.33, 20.0, 50.0), label="growth")


def test_single_day_has_no_growth() -> None:
    """Growth needs at least two days."""
    fake = RecordingTransport(responses=[envelope("dailyPoolStats", POOL_DAYS[0])])
    stats = anyio.run(DailyPoolStatsQueryBuilder(fake).get_pool_performance_stats)
    expect_equal(stats.growth_rate, GrowthRates(), label="growth")


def test_utilization_metrics_read_oldest_first() -> None:
    """Utilization percentages average per-day values in date order."""
    fake = RecordingTransport(responses=[envelope("dailyPoolStats", *POOL_DAYS)])
    builder = DailyPoolStatsQueryBuilder(fake)

    metrics = anyio.run(builder.get_pool_utilization_metrics)

    expect_true("orderBy: date, orderDirection: asc" in fake.last_query, message="order")
    expect_equal(builder.config.order_direction, "desc", label="receiver untouched")
    expect_equal(metrics.utilization_rate, 157.88, label="utilization")
    expect_equal(metrics.efficiency_score, 31.67, label="efficiency")
    expect_equal(metrics.member_retention_rate, 16.74, label="member activity")
    expect_equal(metrics.average_deposit_utilization, 20.0, label="deposits")
    expect_length(metrics.trends, 3, label="trends")
    expect_equal(metrics.trends[1], UtilizationTrend("2024-01-02", 230.77, 35.0, 23.08))


def test_utilization_metrics_of_nothing(transport: RecordingTransport) -> None:
    """No days yields the zero metrics."""
    metrics = anyio.run(DailyPoolStatsQueryBuilder(transport).get_pool_utilization_metrics)
    expect_equal(metrics, PoolUtilizationMetrics())


def test_global_aggregated_stats() -> None:
    """Network-wide stats total every counter and pick the busiest day."""
    fake = RecordingTransport(
        responses=[
            envelope(
                "dailyGlobalStats",
                {
                    "date": "2024-01-01",
                    "newPools": "1",
                    "totalNewMembers": "3",
                    "totalUserOperations": "10",
                    "totalGasSpent": "100",
                    "totalRevenueGenerated": "5",
                },
                {
                    "date": "2024-01-02",
                    "newPools": "2",
                    "totalNewMembers": "4",
                    "totalUserOperations": "30",
                    "totalGasSpent": "201",
                    "totalRevenueGenerated": "6",
                },
            )
        ]
    )
    stats = anyio.run(DailyGlobalStatsQueryBuilder(fake).get_aggregated_stats)
    expect_equal(
        stats,
        AggregatedStats(
            total_days=2,
            total_new_pools="3",
            total_new_members="7",
            total_user_operations="40",
            total_gas_spent="301",
            total_revenue="11",
            average_new_pools=1.5,
            average_new_members=3.5,
            average_user_operations=20.0,
            average_gas_spent="150",
            average_revenue="5",
            peak_day=GlobalPeakDay("2024-01-02", "30", "201", "6"),
        ),
    )


def test_global_aggregated_stats_of_nothing(transport: RecordingTransport) -> None:
    """An empty run has no peak day."""
    stats = anyio.run(DailyGlobalStatsQueryBuilder(transport).get_aggregated_stats)
    expect_equal(stats.total_days, 0, label="days")
    expect_equal(stats.total_user_operations, "0", label="operations")
    expect_true(stats.peak_day is None, message="peak day should be None")


def test_global_ordering_aliases(transport: RecordingTransport) -> None:
    """Named orderings map to their underlying fields."""
    builder = DailyGlobalStatsQueryBuilder(transport).order_by_most_profitable()
    expect_equal(
        (builder.config.order_by, builder.config.order_direction),
        ("totalRevenueGenerated", "desc"),
    )
