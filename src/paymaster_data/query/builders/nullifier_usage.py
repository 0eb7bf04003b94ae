"""Nullifier consumption queries for both paymaster types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.predicates import (
    address,
    big_int,
    boolean,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import NullifierUsage, PaymasterType


@dataclass(frozen=True)
class UsageStats:
    """Consumption summary over a set of nullifiers."""

    total_nullifiers: int
    used_nullifiers: int
    total_gas_used: str
    average_gas_used: str
    usage_rate: float


def _is_consumed(usage: aggregators.Record) -> bool:
    return bool(usage.get("isUsed")) or aggregators.field_value(usage, "gasUsed") > 0


def usage_stats(usages: list[NullifierUsage]) -> UsageStats:
    """
    Summarize nullifier consumption.

    A nullifier counts as used when its flag is set or it has consumed any gas, which
    covers OneTimeUse and GasLimited paymasters alike.

    Returns
    -------
    UsageStats
        Totals as decimal strings, truncated average, and the used share in percent
        rounded to two decimals; all zero for an empty input.
    """
    used = aggregators.count_where(usages, _is_consumed)
    return UsageStats(
        total_nullifiers=len(usages),
        used_nullifiers=used,
        total_gas_used=str(aggregators.total(usages, "gasUsed")),
        average_gas_used=str(aggregators.mean(usages, "gasUsed")),
        usage_rate=aggregators.rate(used, len(usages)),
    )


class NullifierUsageQueryBuilder(BaseQueryBuilder[NullifierUsage]):
    """Queries over ``nullifierUsages``, most recently updated first by default."""

    collection = "nullifierUsages"
    default_order_by = "lastUpdatedTimestamp"
    default_fields = (
        "id",
        "nullifier",
        "network",
        "chainId",
        "paymasterAddress",
        "paymasterType",
        "poolId",
        "isUsed",
        "gasUsed",
        "userOperation { id }",
        "firstUsedAtTimestamp",
        "lastUpdatedTimestamp",
        "createdAtBlock",
        "createdAtTimestamp",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "nullifier",
            "poolId",
            "gasUsed",
            "firstUsedAtBlock",
            "firstUsedAtTimestamp",
            "lastUpdatedBlock",
            "lastUpdatedTimestamp",
            "createdAtBlock",
            "createdAtTimestamp",
        }
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "nullifier": big_int(),
            "nullifier_in": big_int("nullifier_in", many=True),
            "paymasterAddress": address(),
            "paymasterAddress_in": address("paymasterAddress_in", many=True),
            "paymasterType": string(),
            "poolId": big_int(),
            "poolId_in": big_int("poolId_in", many=True),
            "isUsed": boolean(),
            "userOperation_not": string(),
        },
        range_predicates("gasUsed", big_int),
        range_predicates("firstUsedAtTimestamp", big_int),
        range_predicates("lastUpdatedTimestamp", big_int),
        range_predicates("createdAtBlock", big_int),
        range_predicates("createdAtTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_nullifier(self, nullifier: int | str) -> Self:
        """Filter by nullifier value."""
        return self.where({"nullifier": nullifier})

    def by_nullifiers(self, nullifiers: list[int | str]) -> Self:
        """Keep usages of any of ``nullifiers``."""
        return self.where({"nullifier_in": nullifiers})

    def by_paymaster(self, paymaster_address: str) -> Self:
        """Keep usages recorded against one paymaster contract."""
        return self.where({"paymasterAddress": paymaster_address})

    def by_paymaster_type(self, contract_type: PaymasterType) -> Self:
        """Keep usages recorded against paymasters of one type."""
        return self.where({"paymasterType": contract_type})

    def by_pool(self, pool: int | str) -> Self:
        """Keep usages of members of one pool."""
        return self.where({"poolId": pool})

    def only_used(self) -> Self:
        """Keep nullifiers whose used flag is set."""
        return self.where({"isUsed": True})

    def only_unused(self) -> Self:
        """Keep nullifiers whose used flag is not set."""
        return self.where({"isUsed": False})

    def with_gas_used(self) -> Self:
        """Keep nullifiers that consumed at least one unit of gas."""
        return self.where({"gasUsed_gte": 1})

    def gas_used_between(self, low: int | str, high: int | str) -> Self:
        """Keep nullifiers whose gas usage lies within ``[low, high]``."""
        return self.where({"gasUsed_gte": low, "gasUsed_lte": high})

    def with_min_gas_used(self, amount: int | str) -> Self:
        """Keep nullifiers that consumed at least ``amount`` gas."""
        return self.where({"gasUsed_gte": amount})

    def with_max_gas_used(self, amount: int | str) -> Self:
        """Keep nullifiers that consumed at most ``amount`` gas."""
        return self.where({"gasUsed_lte": amount})

    def with_user_operation(self) -> Self:
        """
        Keep usages linked to a user operation.

        The indexer exposes no presence filter on the relation, so an empty-id
        exclusion stands in for it.
        """
        return self.where({"userOperation_not": ""})

    def used_after(self, timestamp: int | str) -> Self:
        """Keep nullifiers first used at or after ``timestamp``."""
        return self.where({"firstUsedAtTimestamp_gte": timestamp})

    def used_before(self, timestamp: int | str) -> Self:
        """Keep nullifiers first used at or before ``timestamp``."""
        return self.where({"firstUsedAtTimestamp_lte": timestamp})

    def updated_after(self, timestamp: int | str) -> Self:
        """Keep usages updated at or after ``timestamp``."""
        return self.where({"lastUpdatedTimestamp_gte": timestamp})

    def updated_before(self, timestamp: int | str) -> Self:
        """Keep usages updated at or before ``timestamp``."""
        return self.where({"lastUpdatedTimestamp_lte": timestamp})

    def order_by_gas_used(self, direction: OrderDirection = "desc") -> Self:
        """Order by gas consumed."""
        return self.order_by("gasUsed", direction)

    def order_by_usage(self, direction: OrderDirection = "desc") -> Self:
        """Order by first use."""
        return self.order_by("firstUsedAtTimestamp", direction)

    def order_by_update(self, direction: OrderDirection = "desc") -> Self:
        """Order by last update."""
        return self.order_by("lastUpdatedTimestamp", direction)

    def order_by_nullifier(self, direction: OrderDirection = "asc") -> Self:
        """Order by nullifier value."""
        return self.order_by("nullifier", direction)

    async def _lookup(self, nullifier: int | str, network: str) -> NullifierUsage | None:
        return await self.clone().by_network(network).by_nullifier(nullifier).first()

    async def is_nullifier_used(self, nullifier: int | str, network: str) -> bool:
        """Return whether the nullifier's used flag is set; unknown nullifiers are unused."""
        usage = await self._lookup(nullifier, network)
        return usage is not None and bool(usage.get("isUsed"))

    async def get_total_gas_used(self, nullifier: int | str, network: str) -> str:
        """Gas consumed by one nullifier as a decimal string, ``"0"`` when unknown."""
        usage = await self._lookup(nullifier, network)
        return "0" if usage is None else str(aggregators.field_value(usage, "gasUsed"))

    async def get_paymaster_stats(self, paymaster_address: str, network: str) -> UsageStats:
        """Consumption summary for every nullifier of one paymaster."""
        usages = await self.clone().by_network(network).by_paymaster(paymaster_address).execute()
        return usage_stats(usages)

    async def get_pool_stats(self, pool: int | str, network: str) -> UsageStats:
        """Consumption summary for every nullifier of one pool."""
        usages = await self.clone().by_network(network).by_pool(pool).execute()
        return usage_stats(usages)

    async def get_all_used_nullifiers(self, network: str) -> list[NullifierUsage]:
        """Every nullifier on ``network`` whose used flag is set."""
        return await self.clone().by_network(network).only_used().execute()

    async def get_gas_limited_usage(
        self, paymaster_address: str, network: str
    ) -> list[NullifierUsage]:
        """GasLimited usages that consumed gas, heaviest first."""
        return await (
            self.clone()
            .by_network(network)
            .by_paymaster(paymaster_address)
            .by_paymaster_type("GasLimited")
            .with_gas_used()
            .order_by_gas_used()
            .execute()
        )

    async def get_one_time_use_usage(
        self, paymaster_address: str, network: str
    ) -> list[NullifierUsage]:
        """Spent OneTimeUse nullifiers, most recently used first."""
        return await (
            self.clone()
            .by_network(network)
            .by_paymaster(paymaster_address)
            .by_paymaster_type("OneTimeUse")
            .only_used()
            .order_by_usage()
            .execute()
        )
