"""Sponsored user operation queries and gas analytics."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.ids import transaction_id
from paymaster_data.query.predicates import (
    address,
    big_int,
    identifier,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import PaymasterType, Transaction


@dataclass(frozen=True)
class GasStatistics:
    """Gas cost and usage figures over a set of operations, as decimal strings."""

    total_operations: int
    total_gas_cost: str
    total_gas_used: str
    average_gas_cost: str
    average_gas_used: str
    average_gas_price: str
    min_gas_cost: str
    max_gas_cost: str
    median_gas_cost: str


@dataclass(frozen=True)
class TimelineEntry:
    """Operations executed on one UTC calendar day."""

    date: str
    operations: int
    total_gas_cost: str
    average_gas_cost: str
    unique_senders: int


@dataclass(frozen=True)
class SenderActivity:
    """Per-sender operation summary."""

    sender: str
    operation_count: int
    total_gas_cost: str
    average_gas_cost: str
    first_operation: str
    last_operation: str


def _or_zero(value: int | None) -> str:
    return "0" if value is None else str(value)


class TransactionQueryBuilder(BaseQueryBuilder[Transaction]):
    """Queries over ``transactions``, most recent execution first by default."""

    collection = "transactions"
    default_order_by = "executedAtTimestamp"
    default_fields = (
        "id",
        "transactionHash",
        "sender",
        "network",
        "chainId",
        "nullifier",
        "actualGasCost",
        "gasPrice",
        "totalGasUsed",
        "executedAtBlock",
        "executedAtTransaction",
        "executedAtTimestamp",
        "paymaster { id address contractType }",
        "pool { id poolId }",
    )
    numeric_fields = frozenset(
        {
            "chainId",
            "poolId",
            "nullifier",
            "actualGasCost",
            "gasPrice",
            "totalGasUsed",
            "executedAtBlock",
            "executedAtTimestamp",
        }
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "transactionHash": string(),
            "sender": address(),
            "nullifier": big_int(),
            "executedAtBlock": big_int(),
            "executedAtTransaction": string(),
            "paymasterAddress": address("address", relation="paymaster_"),
            "paymasterType": string("contractType", relation="paymaster_"),
            "poolId": big_int("poolId", relation="pool_"),
        },
        range_predicates("actualGasCost", big_int),
        range_predicates("gasPrice", big_int),
        range_predicates("totalGasUsed", big_int),
        range_predicates("executedAtTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_hash(self, transaction_hash: str) -> Self:
        """Filter by the hash of the executed user operation."""
        return self.where({"transactionHash": transaction_hash})

    def by_id(self, network: str, transaction_hash: str) -> Self:
        """Filter by the composite ``network-hash`` identifier."""
        return self.where({"id": transaction_id(network, transaction_hash)})

    def by_paymaster(self, paymaster_address: str) -> Self:
        """Keep operations sponsored by one paymaster contract."""
        return self.where({"paymasterAddress": paymaster_address})

    def by_paymaster_type(self, contract_type: PaymasterType) -> Self:
        """Keep operations sponsored by paymasters of one type."""
        return self.where({"paymasterType": contract_type})

    def by_pool(self, pool: int | str) -> Self:
        """Keep operations charged to the pool with the given numeric id."""
        return self.where({"poolId": pool})

    def by_sender(self, sender: str) -> Self:
        """Filter by smart account address."""
        return self.where({"sender": sender})

    def by_nullifier(self, nullifier: int | str) -> Self:
        """Filter by the nullifier consumed by the operation."""
        return self.where({"nullifier": nullifier})

    def with_min_gas_cost(self, amount: int | str) -> Self:
        """Keep operations whose actual gas cost is at least ``amount`` wei."""
        return self.where({"actualGasCost_gte": amount})

    def with_max_gas_cost(self, amount: int | str) -> Self:
        """Keep operations whose actual gas cost is at most ``amount`` wei."""
        return self.where({"actualGasCost_lte": amount})

    def with_min_gas_price(self, price: int | str) -> Self:
        """Keep operations with a gas price of at least ``price``."""
        return self.where({"gasPrice_gte": price})

    def with_max_gas_price(self, price: int | str) -> Self:
        """Keep operations with a gas price of at most ``price``."""
        return self.where({"gasPrice_lte": price})

    def executed_after(self, timestamp: int | str) -> Self:
        """Keep operations executed at or after ``timestamp``."""
        return self.where({"executedAtTimestamp_gte": timestamp})

    def executed_before(self, timestamp: int | str) -> Self:
        """Keep operations executed at or before ``timestamp``."""
        return self.where({"executedAtTimestamp_lte": timestamp})

    def at_block(self, block: int | str) -> Self:
        """Keep operations executed in ``block``."""
        return self.where({"executedAtBlock": block})

    def in_transaction(self, transaction_hash: str) -> Self:
        """Keep operations bundled into one on-chain transaction."""
        return self.where({"executedAtTransaction": transaction_hash})

    def order_by_timestamp(self, direction: OrderDirection = "desc") -> Self:
        """Order by execution time."""
        return self.order_by("executedAtTimestamp", direction)

    def order_by_gas_cost(self, direction: OrderDirection = "desc") -> Self:
        """Order by actual gas cost."""
        return self.order_by("actualGasCost", direction)

    def order_by_gas_price(self, direction: OrderDirection = "desc") -> Self:
        """Order by gas price."""
        return self.order_by("gasPrice", direction)

    def order_by_gas_used(self, direction: OrderDirection = "desc") -> Self:
        """Order by total gas used."""
        return self.order_by("totalGasUsed", direction)

    def order_by_block(self, direction: OrderDirection = "desc") -> Self:
        """Order by execution block."""
        return self.order_by("executedAtBlock", direction)

    def order_by_sender(self, direction: OrderDirection = "asc") -> Self:
        """Order by sender address."""
        return self.order_by("sender", direction)

    async def get_transaction_by_hash(
        self, transaction_hash: str, network: str
    ) -> Transaction | None:
        """Look up one operation by hash on ``network``."""
        return await self.clone().by_id(network, transaction_hash).first()

    async def get_gas_statistics(self) -> GasStatistics:
        """
        Gas figures over the operations matching the current predicates.

        Averages are truncated integer means. The median gas cost takes the
        lower-middle element for an even number of operations.

        Returns
        -------
        GasStatistics
            All amounts as decimal strings; ``"0"`` everywhere for an empty page.
        """
        operations = await self.execute()
        return GasStatistics(
            total_operations=len(operations),
            total_gas_cost=str(aggregators.total(operations, "actualGasCost")),
            total_gas_used=str(aggregators.total(operations, "totalGasUsed")),
            average_gas_cost=str(aggregators.mean(operations, "actualGasCost")),
            average_gas_used=str(aggregators.mean(operations, "totalGasUsed")),
            average_gas_price=str(aggregators.mean(operations, "gasPrice")),
            min_gas_cost=_or_zero(aggregators.minimum(operations, "actualGasCost")),
            max_gas_cost=_or_zero(aggregators.maximum(operations, "actualGasCost")),
            median_gas_cost=_or_zero(aggregators.median_of(operations, "actualGasCost")),
        )

    async def get_operation_timeline(
        self, days: int = 30, now: int | None = None
    ) -> list[TimelineEntry]:
        """
        Daily activity over the last ``days`` days.

        Parameters
        ----------
        days:
            Length of the window ending at ``now``.
        now:
            Window end as a unix timestamp; the current time when omitted.

        Returns
        -------
        list[TimelineEntry]
            One entry per UTC day that has operations, ascending by date.
        """
        end = int(time.time()) if now is None else now
        start = end - days * aggregators.SECONDS_PER_DAY
        operations = await self.clone().executed_after(start).order_by_timestamp("asc").execute()
        rollup = aggregators.daily_rollup(
            operations,
            timestamp_field="executedAtTimestamp",
            value_field="actualGasCost",
            unique_fields=("sender",),
        )
        return [
            TimelineEntry(
                date=bucket.date,
                operations=bucket.count,
                total_gas_cost=str(bucket.total),
                average_gas_cost=str(bucket.average),
                unique_senders=bucket.unique["sender"],
            )
            for bucket in rollup
        ]

    async def get_sender_analysis(self) -> list[SenderActivity]:
        """
        Group the current page by sender.

        Returns
        -------
        list[SenderActivity]
            One entry per sender, most active first; ties keep first-seen order.
        """
        operations = await self.execute()
        grouped: dict[str, list[Transaction]] = {}
        for operation in operations:
            grouped.setdefault(str(operation.get("sender", "")), []).append(operation)
        activity = [
            SenderActivity(
                sender=sender,
                operation_count=len(records),
                total_gas_cost=str(aggregators.total(records, "actualGasCost")),
                average_gas_cost=str(aggregators.mean(records, "actualGasCost")),
                first_operation=_or_zero(aggregators.minimum(records, "executedAtTimestamp")),
                last_operation=_or_zero(aggregators.maximum(records, "executedAtTimestamp")),
            )
            for sender, records in grouped.items()
        ]
        return sorted(activity, key=lambda entry: entry.operation_count, reverse=True)

    async def get_total_gas_spent_by_sender(self, sender: str) -> str:
        """Total actual gas cost paid for ``sender``, as a decimal string."""
        operations = await self.clone().by_sender(sender).execute()
        return str(aggregators.total(operations, "actualGasCost"))
