"""Network-wide daily statistics queries."""

from __future__ import annotations

from dataclasses import dataclass
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
from paymaster_data.query.records import DailyGlobalStats


@dataclass(frozen=True)
class GlobalPeakDay:
    """The day with the most user operations."""

    date: str
    user_operations: str
    gas_spent: str
    revenue: str


@dataclass(frozen=True)
class AggregatedStats:
    """Totals and averages over a run of daily global statistics."""

    total_days: int
    total_new_pools: str
    total_new_members: str
    total_user_operations: str
    total_gas_spent: str
    total_revenue: str
    average_new_pools: float
    average_new_members: float
    average_user_operations: float
    average_gas_spent: str
    average_revenue: str
    peak_day: GlobalPeakDay | None


class DailyGlobalStatsQueryBuilder(BaseQueryBuilder[DailyGlobalStats]):
    """Queries over ``dailyGlobalStats``, latest day first by default."""

    collection = "dailyGlobalStats"
    default_order_by = "date"
    default_fields = (
        "id",
        "date",
        "network",
        "chainId",
        "newPools",
        "totalNewMembers",
        "totalUserOperations",
        "totalGasSpent",
        "totalRevenueGenerated",
        "totalActivePools",
        "totalMembers",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "newPools",
            "totalNewMembers",
            "totalUserOperations",
            "totalGasSpent",
            "totalRevenueGenerated",
            "totalActivePools",
            "totalMembers",
        }
    )
    predicates = merge_tables(
        {"id": identifier(), "network": string()},
        range_predicates("date", string),
        range_predicates("newPools", big_int),
        range_predicates("totalNewMembers", big_int),
        range_predicates("totalUserOperations", big_int),
        range_predicates("totalGasSpent", big_int),
        range_predicates("totalRevenueGenerated", big_int),
        range_predicates("totalActivePools", big_int),
        range_predicates("totalMembers", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def for_date(self, date: str) -> Self:
        """Keep one calendar day."""
        return self.where({"date": date})

    def for_date_range(self, start: str, end: str) -> Self:
        """Keep days within ``[start, end]``."""
        return self.where({"date_gte": start, "date_lte": end})

    def with_min_new_pools(self, count: int | str) -> Self:
        """Keep days whose ``newPools`` is at least ``count``."""
        return self.where({"newPools_gte": count})

    def with_max_new_pools(self, count: int | str) -> Self:
        """Keep days whose ``newPools`` is at most ``count``."""
        return self.where({"newPools_lte": count})

    def with_min_new_members(self, count: int | str) -> Self:
        """Keep days whose ``totalNewMembers`` is at least ``count``."""
        return self.where({"totalNewMembers_gte": count})

    def with_max_new_members(self, count: int | str) -> Self:
        """Keep days whose ``totalNewMembers`` is at most ``count``."""
        return self.where({"totalNewMembers_lte": count})

    def with_min_user_operations(self, count: int | str) -> Self:
        """Keep days whose ``totalUserOperations`` is at least ``count``."""
        return self.where({"totalUserOperations_gte": count})

    def with_max_user_operations(self, count: int | str) -> Self:
        """Keep days whose ``totalUserOperations`` is at most ``count``."""
        return self.where({"totalUserOperations_lte": count})

    def with_min_gas_spent(self, amount: int | str) -> Self:
        """Keep days whose ``totalGasSpent`` is at least ``amount``."""
        return self.where({"totalGasSpent_gte": amount})

    def with_max_gas_spent(self, amount: int | str) -> Self:
        """Keep days whose ``totalGasSpent`` is at most ``amount``."""
        return self.where({"totalGasSpent_lte": amount})

    def with_min_revenue(self, amount: int | str) -> Self:
        """Keep days whose ``totalRevenueGenerated`` is at least ``amount``."""
        return self.where({"totalRevenueGenerated_gte": amount})

    def with_max_revenue(self, amount: int | str) -> Self:
        """Keep days whose ``totalRevenueGenerated`` is at most ``amount``."""
        return self.where({"totalRevenueGenerated_lte": amount})

    def with_min_active_pools(self, count: int | str) -> Self:
        """Keep days whose ``totalActivePools`` is at least ``count``."""
        return self.where({"totalActivePools_gte": count})

    def with_max_active_pools(self, count: int | str) -> Self:
        """Keep days whose ``totalActivePools`` is at most ``count``."""
        return self.where({"totalActivePools_lte": count})

    def with_min_total_members(self, count: int | str) -> Self:
        """Keep days whose ``totalMembers`` is at least ``count``."""
        return self.where({"totalMembers_gte": count})

    def with_max_total_members(self, count: int | str) -> Self:
        """Keep days whose ``totalMembers`` is at most ``count``."""
        return self.where({"totalMembers_lte": count})

    def order_by_date(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``date``."""
        return self.order_by("date", direction)

    def order_by_new_pools(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``newPools``."""
        return self.order_by("newPools", direction)

    def order_by_new_members(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalNewMembers``."""
        return self.order_by("totalNewMembers", direction)

    def order_by_user_operations(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalUserOperations``."""
        return self.order_by("totalUserOperations", direction)

    def order_by_gas_spent(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalGasSpent``."""
        return self.order_by("totalGasSpent", direction)

    def order_by_revenue(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalRevenueGenerated``."""
        return self.order_by("totalRevenueGenerated", direction)

    def order_by_active_pools(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalActivePools``."""
        return self.order_by("totalActivePools", direction)

    def order_by_total_members(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalMembers``."""
        return self.order_by("totalMembers", direction)

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

    async def get_aggregated_stats(self) -> AggregatedStats:
        """
        Totals, averages and the peak day over the current selection.

        Returns
        -------
        AggregatedStats
            Exact totals as decimal strings; pool, member and operation averages
            rounded to two decimals; truncated gas and revenue averages. ``peak_day``
            is ``None`` when nothing matched.
        """
        stats = await self.execute()
        days = len(stats)
        new_pools = aggregators.total(stats, "newPools")
        new_members = aggregators.total(stats, "totalNewMembers")
        operations = aggregators.total(stats, "totalUserOperations")
        peak = aggregators.peak(stats, "totalUserOperations")
        peak_day = (
            None
            if peak is None
            else GlobalPeakDay(
                date=str(peak.get("date", "")),
                user_operations=str(aggregators.field_value(peak, "totalUserOperations")),
                gas_spent=str(aggregators.field_value(peak, "totalGasSpent")),
                revenue=str(aggregators.field_value(peak, "totalRevenueGenerated")),
            )
        )
        return AggregatedStats(
            total_days=days,
            total_new_pools=str(new_pools),
            total_new_members=str(new_members),
            total_user_operations=str(operations),
            total_gas_spent=str(aggregators.total(stats, "totalGasSpent")),
            total_revenue=str(aggregators.total(stats, "totalRevenueGenerated")),
            average_new_pools=aggregators.ratio(new_pools, days),
            average_new_members=aggregators.ratio(new_members, days),
            average_user_operations=aggregators.ratio(operations, days),
            average_gas_spent=str(aggregators.mean(stats, "totalGasSpent")),
            average_revenue=str(aggregators.mean(stats, "totalRevenueGenerated")),
            peak_day=peak_day,
        )
