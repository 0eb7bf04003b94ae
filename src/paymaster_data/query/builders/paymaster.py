"""Paymaster contract queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.ids import paymaster_id
from paymaster_data.query.predicates import (
    address,
    big_int,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import PaymasterContract, PaymasterType


@dataclass(frozen=True)
class RevenueSummary:
    """Revenue and deposit totals across a set of paymasters."""

    total_paymasters: int
    total_revenue: str
    average_revenue: str
    total_deposit: str
    top_paymaster: str | None


class PaymasterQueryBuilder(BaseQueryBuilder[PaymasterContract]):
    """Queries over ``paymasterContracts``, newest deployment first by default."""

    collection = "paymasterContracts"
    default_order_by = "deployedAtTimestamp"
    default_fields = (
        "id",
        "contractType",
        "address",
        "network",
        "chainId",
        "totalUsersDeposit",
        "currentDeposit",
        "revenue",
        "deployedAtBlock",
        "deployedAtTransaction",
        "deployedAtTimestamp",
        "lastUpdatedBlock",
        "lastUpdatedTimestamp",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "totalUsersDeposit",
            "currentDeposit",
            "revenue",
            "deployedAtBlock",
            "deployedAtTimestamp",
            "lastUpdatedBlock",
            "lastUpdatedTimestamp",
        }
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "contractType": string(),
            "address": address(),
            "address_in": address(many=True),
        },
        range_predicates("revenue", big_int),
        range_predicates("currentDeposit", big_int),
        range_predicates("deployedAtTimestamp", big_int),
        range_predicates("lastUpdatedTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_type(self, contract_type: PaymasterType) -> Self:
        """Filter by contract type (``GasLimited`` or ``OneTimeUse``)."""
        return self.where({"contractType": contract_type})

    def by_address(self, contract_address: str) -> Self:
        """Filter by contract address."""
        return self.where({"address": contract_address})

    def by_id(self, network: str, contract_address: str) -> Self:
        """Filter by the composite ``network-address`` identifier."""
        return self.where({"id": paymaster_id(network, contract_address)})

    def with_min_revenue(self, amount: int | str) -> Self:
        """Keep paymasters whose revenue is at least ``amount`` wei."""
        return self.where({"revenue_gte": amount})

    def with_max_revenue(self, amount: int | str) -> Self:
        """Keep paymasters whose revenue is at most ``amount`` wei."""
        return self.where({"revenue_lte": amount})

    def with_min_deposit(self, amount: int | str) -> Self:
        """Keep paymasters whose current deposit is at least ``amount`` wei."""
        return self.where({"currentDeposit_gte": amount})

    def with_max_deposit(self, amount: int | str) -> Self:
        """Keep paymasters whose current deposit is at most ``amount`` wei."""
        return self.where({"currentDeposit_lte": amount})

    def deployed_after(self, timestamp: int | str) -> Self:
        """Keep paymasters deployed at or after ``timestamp``."""
        return self.where({"deployedAtTimestamp_gte": timestamp})

    def deployed_before(self, timestamp: int | str) -> Self:
        """Keep paymasters deployed at or before ``timestamp``."""
        return self.where({"deployedAtTimestamp_lte": timestamp})

    def only_active(self) -> Self:
        """Keep paymasters that have earned any revenue."""
        return self.where({"revenue_gt": 0})

    def order_by_revenue(self, direction: OrderDirection = "desc") -> Self:
        """Order by accumulated revenue."""
        return self.order_by("revenue", direction)

    def order_by_deposit(self, direction: OrderDirection = "desc") -> Self:
        """Order by current deposit."""
        return self.order_by("currentDeposit", direction)

    def order_by_deployment(self, direction: OrderDirection = "desc") -> Self:
        """Order by deployment time."""
        return self.order_by("deployedAtTimestamp", direction)

    def order_by_activity(self, direction: OrderDirection = "desc") -> Self:
        """Order by last update time."""
        return self.order_by("lastUpdatedTimestamp", direction)

    async def get_by_address(self, network: str, contract_address: str) -> PaymasterContract | None:
        """Look up one paymaster by network and address."""
        return await self.clone().by_id(network, contract_address).first()

    async def get_revenue_summary(self) -> RevenueSummary:
        """
        Summarize revenue and deposits over the current selection.

        Returns
        -------
        RevenueSummary
            Totals as decimal strings and the id of the highest-revenue paymaster.
        """
        paymasters = await self.execute()
        top = aggregators.peak(paymasters, "revenue")
        return RevenueSummary(
            total_paymasters=len(paymasters),
            total_revenue=str(aggregators.total(paymasters, "revenue")),
            average_revenue=str(aggregators.mean(paymasters, "revenue")),
            total_deposit=str(aggregators.total(paymasters, "currentDeposit")),
            top_paymaster=None if top is None else str(top.get("id")),
        )
