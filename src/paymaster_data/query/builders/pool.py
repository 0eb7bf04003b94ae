"""Pool queries and pool-level summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.ids import pool_id
from paymaster_data.query.predicates import (
    address,
    big_int,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import PaymasterType, Pool


@dataclass(frozen=True)
class PoolStats:
    """Summary of a set of pools."""

    total_pools: int
    total_members: str
    average_members: str
    total_deposits: str
    most_popular_pool: str | None
    newest_pool: str | None


class PoolQueryBuilder(BaseQueryBuilder[Pool]):
    """Queries over ``pools``, newest first by default."""

    collection = "pools"
    default_order_by = "createdAtTimestamp"
    default_fields = (
        "id",
        "poolId",
        "network",
        "chainId",
        "joiningFee",
        "totalDeposits",
        "memberCount",
        "currentMerkleRoot",
        "currentRootIndex",
        "rootHistoryCount",
        "createdAtBlock",
        "createdAtTransaction",
        "createdAtTimestamp",
        "lastUpdatedBlock",
        "lastUpdatedTimestamp",
        "paymaster { id contractType address }",
    )
    numeric_fields = frozenset(
        {
            "poolId",
            "chainId",
            "joiningFee",
            "totalDeposits",
            "memberCount",
            "currentMerkleRoot",
            "createdAtBlock",
            "createdAtTimestamp",
            "lastUpdatedBlock",
            "lastUpdatedTimestamp",
        }
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "paymasterAddress": address("address", relation="paymaster_"),
            "paymasterAddress_in": address("address_in", relation="paymaster_", many=True),
            "paymasterType": string("contractType", relation="paymaster_"),
        },
        range_predicates("poolId", big_int),
        range_predicates("joiningFee", big_int),
        range_predicates("memberCount", big_int),
        range_predicates("totalDeposits", big_int),
        range_predicates("createdAtTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_pool_id(self, pool: int | str) -> Self:
        """Filter by the numeric pool id."""
        return self.where({"poolId": pool})

    def by_id(self, network: str, pool: int | str) -> Self:
        """Filter by the composite ``network-poolId`` identifier."""
        return self.where({"id": pool_id(network, pool)})

    def by_paymaster(self, paymaster_address: str) -> Self:
        """Keep pools managed by one paymaster contract."""
        return self.where({"paymasterAddress": paymaster_address})

    def by_paymasters(self, paymaster_addresses: list[str]) -> Self:
        """Keep pools managed by any of the given paymaster contracts."""
        return self.where({"paymasterAddress_in": paymaster_addresses})

    def by_paymaster_type(self, contract_type: PaymasterType) -> Self:
        """Keep pools whose paymaster has the given type."""
        return self.where({"paymasterType": contract_type})

    def with_min_joining_fee(self, fee: int | str) -> Self:
        """Keep pools with a joining fee of at least ``fee`` wei."""
        return self.where({"joiningFee_gte": fee})

    def with_max_joining_fee(self, fee: int | str) -> Self:
        """Keep pools with a joining fee of at most ``fee`` wei."""
        return self.where({"joiningFee_lte": fee})

    def joining_fee_between(self, low: int | str, high: int | str) -> Self:
        """Keep pools whose joining fee lies within ``[low, high]``."""
        return self.where({"joiningFee_gte": low, "joiningFee_lte": high})

    def with_min_members(self, count: int) -> Self:
        """Keep pools with at least ``count`` members."""
        return self.where({"memberCount_gte": count})

    def with_max_members(self, count: int) -> Self:
        """Keep pools with at most ``count`` members."""
        return self.where({"memberCount_lte": count})

    def member_count_between(self, low: int, high: int) -> Self:
        """Keep pools whose member count lies within ``[low, high]``."""
        return self.where({"memberCount_gte": low, "memberCount_lte": high})

    def created_after(self, timestamp: int | str) -> Self:
        """Keep pools created at or after ``timestamp``."""
        return self.where({"createdAtTimestamp_gte": timestamp})

    def created_before(self, timestamp: int | str) -> Self:
        """Keep pools created at or before ``timestamp``."""
        return self.where({"createdAtTimestamp_lte": timestamp})

    def order_by_newest(self) -> Self:
        """Newest pools first."""
        return self.order_by("createdAtTimestamp", "desc")

    def order_by_oldest(self) -> Self:
        """Oldest pools first."""
        return self.order_by("createdAtTimestamp", "asc")

    def order_by_popularity(self) -> Self:
        """Pools with most members first."""
        return self.order_by("memberCount", "desc")

    def order_by_affordability(self) -> Self:
        """Cheapest joining fee first."""
        return self.order_by("joiningFee", "asc")

    def order_by_total_deposits(self, direction: OrderDirection = "desc") -> Self:
        """Order by total deposits."""
        return self.order_by("totalDeposits", direction)

    async def get_pool(self, network: str, pool: int | str) -> Pool | None:
        """Look up one pool by network and pool id."""
        return await self.clone().by_id(network, pool).first()

    async def pool_exists(self, network: str, pool: int | str) -> bool:
        """Return whether the pool is indexed on ``network``."""
        return await self.clone().by_id(network, pool).exists()

    async def get_popular_pools(self, count: int = 10) -> list[Pool]:
        """Pools with the most members."""
        return await self.clone().order_by_popularity().limit(count).execute()

    async def get_affordable_pools(self, count: int = 10) -> list[Pool]:
        """Pools with the lowest joining fee."""
        return await self.clone().order_by_affordability().limit(count).execute()

    async def get_recent_pools(self, count: int = 10) -> list[Pool]:
        """Most recently created pools."""
        return await self.clone().order_by_newest().limit(count).execute()

    async def get_pool_stats(self) -> PoolStats:
        """
        Summarize the pools matching the current predicates.

        Returns
        -------
        PoolStats
            Member and deposit totals, truncated average members per pool, and the ids
            of the most popular and newest pools (``None`` when nothing matched).
        """
        pools = await self.execute()
        popular = aggregators.peak(pools, "memberCount")
        newest = aggregators.peak(pools, "createdAtTimestamp")
        return PoolStats(
            total_pools=len(pools),
            total_members=str(aggregators.total(pools, "memberCount")),
            average_members=str(aggregators.mean(pools, "memberCount")),
            total_deposits=str(aggregators.total(pools, "totalDeposits")),
            most_popular_pool=None if popular is None else str(popular.get("id")),
            newest_pool=None if newest is None else str(newest.get("id")),
        )
