"""Pool membership queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.predicates import (
    big_int,
    boolean,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import PoolMember


@dataclass(frozen=True)
class MemberStats:
    """Gas and nullifier usage across a set of memberships."""

    total_members: int
    members_with_gas_used: int
    total_gas_used: str
    average_gas_used: str
    nullifiers_used: int
    usage_rate: float


class MemberQueryBuilder(BaseQueryBuilder[PoolMember]):
    """Queries over ``poolMembers``, most recently joined first by default."""

    collection = "poolMembers"
    default_order_by = "addedAtTimestamp"
    default_fields = (
        "id",
        "network",
        "chainId",
        "memberIndex",
        "identityCommitment",
        "merkleRootWhenAdded",
        "rootIndexWhenAdded",
        "addedAtBlock",
        "addedAtTransaction",
        "addedAtTimestamp",
        "gasUsed",
        "nullifierUsed",
        "nullifier",
        "pool { id poolId network chainId }",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "poolId",
            "memberIndex",
            "identityCommitment",
            "merkleRootWhenAdded",
            "addedAtBlock",
            "addedAtTimestamp",
            "gasUsed",
            "nullifier",
        }
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "pool": string(),
            "poolId": big_int("poolId", relation="pool_"),
            "identityCommitment": big_int(),
            "identityCommitment_in": big_int("identityCommitment_in", many=True),
            "nullifierUsed": boolean(),
        },
        range_predicates("memberIndex", big_int),
        range_predicates("addedAtTimestamp", big_int),
        range_predicates("gasUsed", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def in_pool(self, pool: int | str) -> Self:
        """Keep members of the pool with the given numeric id."""
        return self.where({"poolId": pool})

    def by_identity(self, commitment: int | str) -> Self:
        """Filter by identity commitment."""
        return self.where({"identityCommitment": commitment})

    def by_identities(self, commitments: list[int | str]) -> Self:
        """Keep members whose commitment is in ``commitments``."""
        return self.where({"identityCommitment_in": commitments})

    def member_index_between(self, low: int | str, high: int | str) -> Self:
        """Keep members whose index lies within ``[low, high]``."""
        return self.where({"memberIndex_gte": low, "memberIndex_lte": high})

    def joined_after(self, timestamp: int | str) -> Self:
        """Keep members added at or after ``timestamp``."""
        return self.where({"addedAtTimestamp_gte": timestamp})

    def joined_before(self, timestamp: int | str) -> Self:
        """Keep members added at or before ``timestamp``."""
        return self.where({"addedAtTimestamp_lte": timestamp})

    def with_gas_used(self) -> Self:
        """Keep GasLimited members that have consumed any gas."""
        return self.where({"gasUsed_gt": 0})

    def nullifier_used(self, *, used: bool = True) -> Self:
        """Filter OneTimeUse members by whether their nullifier was spent."""
        return self.where({"nullifierUsed": used})

    def order_by_newest_joined(self) -> Self:
        """Most recently added first."""
        return self.order_by("addedAtTimestamp", "desc")

    def order_by_oldest_joined(self) -> Self:
        """Earliest added first."""
        return self.order_by("addedAtTimestamp", "asc")

    def order_by_member_index(self, direction: OrderDirection = "asc") -> Self:
        """Order by position in the pool's tree."""
        return self.order_by("memberIndex", direction)

    def order_by_gas_used(self, direction: OrderDirection = "desc") -> Self:
        """Order by gas consumed."""
        return self.order_by("gasUsed", direction)

    async def is_member(self, network: str, pool: int | str, commitment: int | str) -> bool:
        """Return whether ``commitment`` has joined the pool on ``network``."""
        return await self.clone().by_network(network).in_pool(pool).by_identity(commitment).exists()

    async def get_member_stats(self) -> MemberStats:
        """
        Aggregate gas and nullifier usage over the current selection.

        Returns
        -------
        MemberStats
            Exact totals as decimal strings; ``usage_rate`` is the share of members with
            any usage, in percent rounded to two decimals.
        """
        members = await self.execute()
        with_gas = aggregators.count_where(
            members, lambda member: aggregators.field_value(member, "gasUsed") > 0
        )
        spent = aggregators.count_where(members, lambda member: bool(member.get("nullifierUsed")))
        active = aggregators.count_where(
            members,
            lambda member: bool(member.get("nullifierUsed"))
            or aggregators.field_value(member, "gasUsed") > 0,
        )
        return MemberStats(
            total_members=len(members),
            members_with_gas_used=with_gas,
            total_gas_used=str(aggregators.total(members, "gasUsed")),
            average_gas_used=str(aggregators.mean(members, "gasUsed")),
            nullifiers_used=spent,
            usage_rate=aggregators.rate(active, len(members)),
        )
