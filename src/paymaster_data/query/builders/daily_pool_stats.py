"""Per-pool daily statistics queries and performance analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.predicates import (
    big_int,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import DailyPoolStats


@dataclass(frozen=True)
class PoolPeakDay:
    """The most active day of a pool."""

    date: str
    new_members: str
    user_operations: str
    gas_spent: str
    revenue: str


@dataclass(frozen=True)
class GrowthRates:
    """Linear per-day growth approximations."""

    members: float = 0.0
    operations: float = 0.0
    revenue: float = 0.0


@dataclass(frozen=True)
class PoolPerformanceStats:
    """Totals, averages and growth over a run of daily pool statistics."""

    total_days: int
    total_new_members: str
    total_user_operations: str
    total_gas_spent: str
    total_revenue: str
    average_new_members: float
    average_user_operations: float
    average_gas_spent: str
    average_revenue: str
    peak_day: PoolPeakDay | None
    growth_rate: GrowthRates


@dataclass(frozen=True)
class UtilizationTrend:
    """Utilization percentages for one day."""

    date: str
    utilization: float
    efficiency: float
    member_activity: float


@dataclass(frozen=True)
class PoolUtilizationMetrics:
    """Average utilization percentages and their daily trend."""

    utilization_rate: float = 0.0
    efficiency_score: float = 0.0
    member_retention_rate: float = 0.0
    average_deposit_utilization: float = 0.0
    trends: list[UtilizationTrend] = field(default_factory=list)


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _rounded_mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), aggregators.DISPLAY_PRECISION)


def _peak_day(stats: list[DailyPoolStats]) -> PoolPeakDay | None:
    peak = aggregators.peak(stats, "userOperations")
    if peak is None:
        return None
    return PoolPeakDay(
        date=str(peak.get("date", "")),
        new_members=str(aggregators.field_value(peak, "newMembers")),
        user_operations=str(aggregators.field_value(peak, "userOperations")),
        gas_spent=str(aggregators.field_value(peak, "gasSpent")),
        revenue=str(aggregators.field_value(peak, "revenueGenerated")),
    )


def _growth_rates(stats: list[DailyPoolStats], operations: int, revenue: int) -> GrowthRates:
    days = len(stats)
    if days <= 1:
        return GrowthRates()
    member_delta = aggregators.field_value(stats[-1], "totalMembers") - aggregators.field_value(
        stats[0], "totalMembers"
    )
    return GrowthRates(
        members=aggregators.ratio(member_delta, days),
        operations=aggregators.ratio(operations, days),
        revenue=aggregators.ratio(revenue, days),
    )


class DailyPoolStatsQueryBuilder(BaseQueryBuilder[DailyPoolStats]):
    """Queries over ``dailyPoolStats``, latest day first by default."""

    collection = "dailyPoolStats"
    default_order_by = "date"
    default_fields = (
        "id",
        "date",
        "poolId",
        "network",
        "chainId",
        "newMembers",
        "userOperations",
        "gasSpent",
        "revenueGenerated",
        "totalMembers",
        "totalDeposits",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "poolId",
            "newMembers",
            "userOperations",
            "gasSpent",
            "revenueGenerated",
            "totalMembers",
            "totalDeposits",
        }
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "poolId": big_int(),
        },
        range_predicates("date", string),
        range_predicates("newMembers", big_int),
        range_predicates("userOperations", big_int),
        range_predicates("gasSpent", big_int),
        range_predicates("revenueGenerated", big_int),
        range_predicates("totalMembers", big_int),
        range_predicates("totalDeposits", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_pool(self, pool: int | str) -> Self:
        """Keep the statistics of one pool."""
        return self.where({"poolId": pool})

    def for_date(self, date: str) -> Self:
        """Keep one calendar day."""
        return self.where({"date": date})

    def for_date_range(self, start: str, end: str) -> Self:
        """Keep days within ``[start, end]``."""
        return self.where({"date_gte": start, "date_lte": end})

    def with_min_new_members(self, count: int | str) -> Self:
        """Keep days whose ``newMembers`` is at least ``count``."""
        return self.where({"newMembers_gte": count})

    def with_max_new_members(self, count: int | str) -> Self:
        """Keep days whose ``newMembers`` is at most ``count``."""
        return self.where({"newMembers_lte": count})

    def with_min_user_operations(self, count: int | str) -> Self:
        """Keep days whose ``userOperations`` is at least ``count``."""
        return self.where({"userOperations_gte": count})

    def with_max_user_operations(self, count: int | str) -> Self:
        """Keep days whose ``userOperations`` is at most ``count``."""
        return self.where({"userOperations_lte": count})

    def with_min_gas_spent(self, amount: int | str) -> Self:
        """Keep days whose ``gasSpent`` is at least ``amount``."""
        return self.where({"gasSpent_gte": amount})

    def with_max_gas_spent(self, amount: int | str) -> Self:
        """Keep days whose ``gasSpent`` is at most ``amount``."""
        return self.where({"gasSpent_lte": amount})

    def with_min_revenue(self, amount: int | str) -> Self:
        """Keep days whose ``revenueGenerated`` is at least ``amount``."""
        return self.where({"revenueGenerated_gte": amount})

    def with_max_revenue(self, amount: int | str) -> Self:
        """Keep days whose ``revenueGenerated`` is at most ``amount``."""
        return self.where({"revenueGenerated_lte": amount})

    def with_min_total_members(self, count: int | str) -> Self:
        """Keep days whose ``totalMembers`` is at least ``count``."""
        return self.where({"totalMembers_gte": count})

    def with_max_total_members(self, count: int | str) -> Self:
        """Keep days whose ``totalMembers`` is at most ``count``."""
        return self.where({"totalMembers_lte": count})

    def with_min_total_deposits(self, amount: int | str) -> Self:
        """Keep days whose ``totalDeposits`` is at least ``amount``."""
        return self.where({"totalDeposits_gte": amount})

    def with_max_total_deposits(self, amount: int | str) -> Self:
        """Keep days whose ``totalDeposits`` is at most ``amount``."""
        return self.where({"totalDeposits_lte": amount})

    def order_by_date(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``date``."""
        return self.order_by("date", direction)

    def order_by_new_members(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``newMembers``."""
        return self.order_by("newMembers", direction)

    def order_by_user_operations(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``userOperations``."""
        return self.order_by("userOperations", direction)

    def order_by_gas_spent(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``gasSpent``."""
        return self.order_by("gasSpent", direction)

    def order_by_revenue(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``revenueGenerated``."""
        return self.order_by("revenueGenerated", direction)

    def order_by_total_members(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalMembers``."""
        return self.order_by("totalMembers", direction)

    def order_by_total_deposits(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalDeposits``."""
        return self.order_by("totalDeposits", direction)

    def order_by_newest(self) -> Self:
        """Latest day first."""
        return self.order_by_date("desc")

    def order_by_oldest(self) -> Self:
        """Earliest day first."""
        return self.order_by_date("asc")

    def order_by_most_active(self) -> Self:
        """Days with the most user operations first."""
        return self.order_by_user_operations("desc")

    def order_by_highest_growth(self) -> Self:
        """Days with the most new members first."""
        return self.order_by_new_members("desc")

    def order_by_most_profitable(self) -> Self:
        """Days with the most revenue first."""
        return self.order_by_revenue("desc")

    async def get_pool_performance_stats(self) -> PoolPerformanceStats:
        """
        Totals, averages, peak day and growth over the current selection.

        Growth rates compare the last and first returned days, so order the builder
        by date ascending for a chronological reading. They are computed only when
        more than one day is present.

        Returns
        -------
        PoolPerformanceStats
            Exact totals as decimal strings, member and operation averages rounded to
            two decimals, truncated gas and revenue averages.
        """
        stats = await self.execute()
        days = len(stats)
        new_members = aggregators.total(stats, "newMembers")
        operations = aggregators.total(stats, "userOperations")
        revenue = aggregators.total(stats, "revenueGenerated")
        return PoolPerformanceStats(
            total_days=days,
            total_new_members=str(new_members),
            total_user_operations=str(operations),
            total_gas_spent=str(aggregators.total(stats, "gasSpent")),
            total_revenue=str(revenue),
            average_new_members=aggregators.ratio(new_members, days),
            average_user_operations=aggregators.ratio(operations, days),
            average_gas_spent=str(aggregators.mean(stats, "gasSpent")),
            average_revenue=str(aggregators.mean(stats, "revenueGenerated")),
            peak_day=_peak_day(stats),
            growth_rate=_growth_rates(stats, operations, revenue),
        )

    async def get_pool_utilization_metrics(self) -> PoolUtilizationMetrics:
        """
        Daily utilization, efficiency and member activity percentages, oldest day first.

        Utilization is user operations per member, efficiency is revenue per unit of gas
        spent and member activity is new members per member, all in percent. Deposit
        utilization relates total gas spent to total deposits across the run.

        Returns
        -------
        PoolUtilizationMetrics
            Averages and per-day trends rounded to two decimals; zeros when empty.
        """
        stats = await self.clone().order_by_date("asc").execute()
        if not stats:
            return PoolUtilizationMetrics()
        utilization: list[float] = []
        efficiency: list[float] = []
        activity: list[float] = []
        trends: list[UtilizationTrend] = []
        for day in stats:
            members = aggregators.field_value(day, "totalMembers")
            utilization.append(_percent(aggregators.field_value(day, "userOperations"), members))
            efficiency.append(
                _percent(
                    aggregators.field_value(day, "revenueGenerated"),
                    aggregators.field_value(day, "gasSpent"),
                )
            )
            activity.append(_percent(aggregators.field_value(day, "newMembers"), members))
            trends.append(
                UtilizationTrend(
                    date=str(day.get("date", "")),
                    utilization=round(utilization[-1], aggregators.DISPLAY_PRECISION),
                    efficiency=round(efficiency[-1], aggregators.DISPLAY_PRECISION),
                    member_activity=round(activity[-1], aggregators.DISPLAY_PRECISION),
                )
            )
        return PoolUtilizationMetrics(
            utilization_rate=_rounded_mean(utilization),
            efficiency_score=_rounded_mean(efficiency),
            member_retention_rate=_rounded_mean(activity),
            average_deposit_utilization=aggregators.rate(
                aggregators.total(stats, "gasSpent"), aggregators.total(stats, "totalDeposits")
            ),
            trends=trends,
        )
