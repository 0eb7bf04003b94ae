"""Revenue withdrawal queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.predicates import (
    address,
    big_int,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import RevenueWithdrawal


@dataclass(frozen=True)
class WithdrawalSummary:
    """Totals over a set of revenue withdrawals."""

    total_withdrawals: int
    total_amount: str
    average_amount: str
    largest_amount: str
    unique_recipients: int


class WithdrawalQueryBuilder(BaseQueryBuilder[RevenueWithdrawal]):
    """Queries over ``revenueWithdrawals``, newest first by default."""

    collection = "revenueWithdrawals"
    default_order_by = "withdrawnAtTimestamp"
    default_fields = (
        "id",
        "network",
        "chainId",
        "recipient",
        "amount",
        "withdrawnAtBlock",
        "withdrawnAtTransaction",
        "withdrawnAtTimestamp",
        "paymaster { id address contractType }",
    )
    numeric_fields = frozenset(
        {"chainId", "amount", "withdrawnAtBlock", "withdrawnAtTimestamp"}
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "recipient": address(),
            "recipient_in": address(many=True),
            "paymasterAddress": address("address", relation="paymaster_"),
        },
        range_predicates("amount", big_int),
        range_predicates("withdrawnAtBlock", big_int),
        range_predicates("withdrawnAtTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_paymaster(self, paymaster_address: str) -> Self:
        """Keep withdrawals from one paymaster contract."""
        return self.where({"paymasterAddress": paymaster_address})

    def by_recipient(self, recipient: str) -> Self:
        """Filter by recipient address."""
        return self.where({"recipient": recipient})

    def by_recipients(self, recipients: list[str]) -> Self:
        """Keep withdrawals paid to any of ``recipients``."""
        return self.where({"recipient_in": recipients})

    def with_min_amount(self, amount: int | str) -> Self:
        """Keep withdrawals of at least ``amount`` wei."""
        return self.where({"amount_gte": amount})

    def with_max_amount(self, amount: int | str) -> Self:
        """Keep withdrawals of at most ``amount`` wei."""
        return self.where({"amount_lte": amount})

    def amount_between(self, low: int | str, high: int | str) -> Self:
        """Keep withdrawals whose amount lies within ``[low, high]``."""
        return self.where({"amount_gte": low, "amount_lte": high})

    def withdrawn_after(self, timestamp: int | str) -> Self:
        """Keep withdrawals made strictly after ``timestamp``."""
        return self.where({"withdrawnAtTimestamp_gt": timestamp})

    def withdrawn_before(self, timestamp: int | str) -> Self:
        """Keep withdrawals made strictly before ``timestamp``."""
        return self.where({"withdrawnAtTimestamp_lt": timestamp})

    def withdrawn_between(self, start: int | str, end: int | str) -> Self:
        """Keep withdrawals made within ``[start, end]``."""
        return self.where({"withdrawnAtTimestamp_gte": start, "withdrawnAtTimestamp_lte": end})

    def at_block(self, block: int | str) -> Self:
        """Keep withdrawals made in ``block``."""
        return self.where({"withdrawnAtBlock": block})

    def order_by_newest(self) -> Self:
        """Most recent withdrawals first."""
        return self.order_by("withdrawnAtTimestamp", "desc")

    def order_by_oldest(self) -> Self:
        """Earliest withdrawals first."""
        return self.order_by("withdrawnAtTimestamp", "asc")

    def order_by_amount(self, direction: OrderDirection = "desc") -> Self:
        """Order by withdrawn amount."""
        return self.order_by("amount", direction)

    async def get_total_withdrawn_by_recipient(self, recipient: str) -> str:
        """Total amount paid to ``recipient``, as a decimal string."""
        withdrawals = await self.clone().by_recipient(recipient).execute()
        return str(aggregators.total(withdrawals, "amount"))

    async def get_withdrawal_summary(self) -> WithdrawalSummary:
        """
        Summarize the withdrawals matching the current predicates.

        Returns
        -------
        WithdrawalSummary
            Amounts as decimal strings with a truncated mean; zeros for an empty page.
        """
        withdrawals = await self.execute()
        largest = aggregators.maximum(withdrawals, "amount")
        return WithdrawalSummary(
            total_withdrawals=len(withdrawals),
            total_amount=str(aggregators.total(withdrawals, "amount")),
            average_amount=str(aggregators.mean(withdrawals, "amount")),
            largest_amount="0" if largest is None else str(largest),
            unique_recipients=aggregators.unique_count(withdrawals, "recipient"),
        )
