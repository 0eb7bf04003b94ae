"""Per-network aggregate queries."""

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
from paymaster_data.query.records import NetworkInfo

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class NetworkStatistics:
    """Totals across all indexed networks."""

    total_networks: int
    total_paymasters: str
    total_pools: str
    total_members: str
    total_user_operations: str
    total_gas_spent: str
    total_revenue: str
    most_active_network: str
    most_profitable_network: str


@dataclass(frozen=True)
class NetworkComparison:
    """One network's totals with derived per-unit averages."""

    network_name: str
    chain_id: str
    total_paymasters: str
    total_pools: str
    total_members: str
    total_user_operations: str
    total_gas_spent: str
    total_revenue: str
    avg_revenue_per_paymaster: str
    avg_members_per_pool: str
    utilization_rate: str


def _name_of(record: NetworkInfo | None) -> str:
    if record is None:
        return NOT_AVAILABLE
    return str(record.get("name") or NOT_AVAILABLE)


def _compare(network: NetworkInfo) -> NetworkComparison:
    paymasters = aggregators.field_value(network, "totalPaymasters")
    pools = aggregators.field_value(network, "totalPools")
    members = aggregators.field_value(network, "totalMembers")
    operations = aggregators.field_value(network, "totalUserOperations")
    revenue = aggregators.field_value(network, "totalRevenue")
    return NetworkComparison(
        network_name=str(network.get("name", "")),
        chain_id=str(aggregators.field_value(network, "chainId")),
        total_paymasters=str(paymasters),
        total_pools=str(pools),
        total_members=str(members),
        total_user_operations=str(operations),
        total_gas_spent=str(aggregators.field_value(network, "totalGasSpent")),
        total_revenue=str(revenue),
        avg_revenue_per_paymaster=str(aggregators.truncating_div(revenue, paymasters)),
        avg_members_per_pool=str(aggregators.truncating_div(members, pools)),
        utilization_rate=str(aggregators.truncating_div(operations * 100, members)),
    )


class NetworkInfoQueryBuilder(BaseQueryBuilder[NetworkInfo]):
    """Queries over ``networkInfos``, ordered by name by default."""

    collection = "networkInfos"
    default_order_by = "name"
    default_order_direction = "asc"
    default_fields = (
        "id",
        "name",
        "chainId",
        "totalPaymasters",
        "totalPools",
        "totalMembers",
        "totalUserOperations",
        "totalGasSpent",
        "totalRevenue",
        "firstDeploymentBlock",
        "firstDeploymentTimestamp",
        "lastActivityBlock",
        "lastActivityTimestamp",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "totalPaymasters",
            "totalPools",
            "totalMembers",
            "totalUserOperations",
            "totalGasSpent",
            "totalRevenue",
            "firstDeploymentBlock",
            "firstDeploymentTimestamp",
            "lastActivityBlock",
            "lastActivityTimestamp",
        }
    )
    predicates = merge_tables(
        {"id": identifier(), "name": string(), "chainId": big_int()},
        range_predicates("totalPaymasters", big_int),
        range_predicates("totalPools", big_int),
        range_predicates("totalMembers", big_int),
        range_predicates("totalUserOperations", big_int),
        range_predicates("totalGasSpent", big_int),
        range_predicates("totalRevenue", big_int),
        range_predicates("firstDeploymentTimestamp", big_int),
        range_predicates("lastActivityTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"name": network})

    def by_chain_id(self, chain_id: int) -> Self:
        """Filter by EVM chain id."""
        return self.where({"chainId": chain_id})

    def with_min_paymasters(self, count: int | str) -> Self:
        """Keep networks whose ``totalPaymasters`` is at least ``count``."""
        return self.where({"totalPaymasters_gte": count})

    def with_max_paymasters(self, count: int | str) -> Self:
        """Keep networks whose ``totalPaymasters`` is at most ``count``."""
        return self.where({"totalPaymasters_lte": count})

    def with_min_pools(self, count: int | str) -> Self:
        """Keep networks whose ``totalPools`` is at least ``count``."""
        return self.where({"totalPools_gte": count})

    def with_max_pools(self, count: int | str) -> Self:
        """Keep networks whose ``totalPools`` is at most ``count``."""
        return self.where({"totalPools_lte": count})

    def with_min_members(self, count: int | str) -> Self:
        """Keep networks whose ``totalMembers`` is at least ``count``."""
        return self.where({"totalMembers_gte": count})

    def with_max_members(self, count: int | str) -> Self:
        """Keep networks whose ``totalMembers`` is at most ``count``."""
        return self.where({"totalMembers_lte": count})

    def with_min_user_operations(self, count: int | str) -> Self:
        """Keep networks whose ``totalUserOperations`` is at least ``count``."""
        return self.where({"totalUserOperations_gte": count})

    def with_max_user_operations(self, count: int | str) -> Self:
        """Keep networks whose ``totalUserOperations`` is at most ``count``."""
        return self.where({"totalUserOperations_lte": count})

    def with_min_gas_spent(self, amount: int | str) -> Self:
        """Keep networks whose ``totalGasSpent`` is at least ``amount``."""
        return self.where({"totalGasSpent_gte": amount})

    def with_max_gas_spent(self, amount: int | str) -> Self:
        """Keep networks whose ``totalGasSpent`` is at most ``amount``."""
        return self.where({"totalGasSpent_lte": amount})

    def with_min_revenue(self, amount: int | str) -> Self:
        """Keep networks whose ``totalRevenue`` is at least ``amount``."""
        return self.where({"totalRevenue_gte": amount})

    def with_max_revenue(self, amount: int | str) -> Self:
        """Keep networks whose ``totalRevenue`` is at most ``amount``."""
        return self.where({"totalRevenue_lte": amount})

    def deployed_after(self, timestamp: int | str) -> Self:
        """Keep networks first deployed at or after ``timestamp``."""
        return self.where({"firstDeploymentTimestamp_gte": timestamp})

    def deployed_before(self, timestamp: int | str) -> Self:
        """Keep networks first deployed at or before ``timestamp``."""
        return self.where({"firstDeploymentTimestamp_lte": timestamp})

    def active_after(self, timestamp: int | str) -> Self:
        """Keep networks with activity at or after ``timestamp``."""
        return self.where({"lastActivityTimestamp_gte": timestamp})

    def active_before(self, timestamp: int | str) -> Self:
        """Keep networks whose last activity is at or before ``timestamp``."""
        return self.where({"lastActivityTimestamp_lte": timestamp})

    def order_by_paymasters(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalPaymasters``."""
        return self.order_by("totalPaymasters", direction)

    def order_by_pools(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalPools``."""
        return self.order_by("totalPools", direction)

    def order_by_members(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalMembers``."""
        return self.order_by("totalMembers", direction)

    def order_by_user_operations(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalUserOperations``."""
        return self.order_by("totalUserOperations", direction)

    def order_by_gas_spent(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalGasSpent``."""
        return self.order_by("totalGasSpent", direction)

    def order_by_revenue(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``totalRevenue``."""
        return self.order_by("totalRevenue", direction)

    def order_by_deployment(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``firstDeploymentTimestamp``."""
        return self.order_by("firstDeploymentTimestamp", direction)

    def order_by_activity(self, direction: OrderDirection = "desc") -> Self:
        """Order by ``lastActivityTimestamp``."""
        return self.order_by("lastActivityTimestamp", direction)

    def order_by_chain_id(self, direction: OrderDirection = "asc") -> Self:
        """Order by ``chainId``."""
        return self.order_by("chainId", direction)

    async def get_network_statistics(self) -> NetworkStatistics:
        """
        Totals across the networks matching the current predicates.

        Returns
        -------
        NetworkStatistics
            Exact totals as decimal strings and the names of the networks with the most
            user operations and the most revenue, ``"N/A"`` when nothing matched.
        """
        networks = await self.execute()
        return NetworkStatistics(
            total_networks=len(networks),
            total_paymasters=str(aggregators.total(networks, "totalPaymasters")),
            total_pools=str(aggregators.total(networks, "totalPools")),
            total_members=str(aggregators.total(networks, "totalMembers")),
            total_user_operations=str(aggregators.total(networks, "totalUserOperations")),
            total_gas_spent=str(aggregators.total(networks, "totalGasSpent")),
            total_revenue=str(aggregators.total(networks, "totalRevenue")),
            most_active_network=_name_of(aggregators.peak(networks, "totalUserOperations")),
            most_profitable_network=_name_of(aggregators.peak(networks, "totalRevenue")),
        )

    async def get_network_comparison(self) -> list[NetworkComparison]:
        """
        Per-network averages in exact integer arithmetic.

        Revenue per paymaster and members per pool are truncated quotients; the
        utilization rate is ``operations * 100 // members``. Zero denominators give 0.

        Returns
        -------
        list[NetworkComparison]
            One entry per network, in result order.
        """
        networks = await self.execute()
        return [_compare(network) for network in networks]
