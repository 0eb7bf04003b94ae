"""Merkle root history queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from paymaster_data.analytics import aggregators
from paymaster_data.query.builder import BaseQueryBuilder
from paymaster_data.query.config import OrderDirection
from paymaster_data.query.ids import merkle_root_id, pool_id
from paymaster_data.query.predicates import (
    big_int,
    identifier,
    integer,
    merge_tables,
    range_predicates,
    string,
)
from paymaster_data.query.records import MerkleRoot

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class RootIndexEntry:
    """Compact view of one valid root."""

    root_index: int
    root: str
    created_at_timestamp: str


@dataclass(frozen=True)
class RootStatistics:
    """Timing statistics for a pool's root history."""

    total_roots: int
    latest_index: int
    oldest_root: str
    newest_root: str
    average_time_between_roots: int
    root_creation_rate: float


def _index_entry(record: MerkleRoot) -> RootIndexEntry:
    return RootIndexEntry(
        root_index=int(record.get("rootIndex", 0)),
        root=str(record.get("root", "")),
        created_at_timestamp=str(record.get("createdAtTimestamp", 0)),
    )


class MerkleRootQueryBuilder(BaseQueryBuilder[MerkleRoot]):
    """Queries over ``merkleRoots``, highest root index first by default."""

    collection = "merkleRoots"
    default_order_by = "rootIndex"
    default_fields = (
        "id",
        "network",
        "chainId",
        "rootIndex",
        "root",
        "createdAtBlock",
        "createdAtTransaction",
        "createdAtTimestamp",
        "pool { id poolId network }",
    )
    numeric_fields = frozenset(
        {"chainId", "poolId", "root", "createdAtBlock", "createdAtTimestamp"}
    )
    predicates = merge_tables(
        {
            "id": identifier(),
            "network": string(),
            "pool": string(),
            "root": big_int(),
            "createdAtBlock": big_int(),
            "createdAtTransaction": string(),
        },
        range_predicates("rootIndex", integer),
        range_predicates("createdAtTimestamp", big_int),
    )

    def by_network(self, network: str) -> Self:
        """Filter by network name."""
        return self.where({"network": network})

    def by_id(self, network: str, pool: int | str, root_index: int) -> Self:
        """Filter by the composite ``network-poolId-rootIndex`` identifier."""
        return self.where({"id": merkle_root_id(network, pool, root_index)})

    def by_pool(self, pool: int | str, network: str | None = None) -> Self:
        """
        Keep roots of one pool.

        The pool relation holds the pool entity id, so the network is needed to rebuild
        it; it defaults to the network passed to :meth:`by_network`.

        Returns
        -------
        Self
            This builder, for chaining.
        """
        resolved = network or self._current_network()
        key = pool_id(resolved, pool) if resolved else str(pool)
        return self.where({"pool": key})

    def _current_network(self) -> str | None:
        value = self.config.where.get("network")
        return None if value is None else str(value)

    def at_index(self, root_index: int) -> Self:
        """Keep the root stored at ``root_index``."""
        return self.where({"rootIndex": root_index})

    def by_root(self, root: int | str) -> Self:
        """Filter by root value."""
        return self.where({"root": root})

    def with_min_index(self, root_index: int) -> Self:
        """Keep roots at or above ``root_index``."""
        return self.where({"rootIndex_gte": root_index})

    def with_max_index(self, root_index: int) -> Self:
        """Keep roots at or below ``root_index``."""
        return self.where({"rootIndex_lte": root_index})

    def created_after(self, timestamp: int | str) -> Self:
        """Keep roots created at or after ``timestamp``."""
        return self.where({"createdAtTimestamp_gte": timestamp})

    def created_before(self, timestamp: int | str) -> Self:
        """Keep roots created at or before ``timestamp``."""
        return self.where({"createdAtTimestamp_lte": timestamp})

    def at_block(self, block: int | str) -> Self:
        """Keep roots created in ``block``."""
        return self.where({"createdAtBlock": block})

    def in_transaction(self, transaction_hash: str) -> Self:
        """Keep roots created by one transaction."""
        return self.where({"createdAtTransaction": transaction_hash})

    def order_by_index(self, direction: OrderDirection = "desc") -> Self:
        """Order by root index."""
        return self.order_by("rootIndex", direction)

    def order_by_creation(self, direction: OrderDirection = "desc") -> Self:
        """Order by creation time."""
        return self.order_by("createdAtTimestamp", direction)

    def order_by_block(self, direction: OrderDirection = "desc") -> Self:
        """Order by creation block."""
        return self.order_by("createdAtBlock", direction)

    def order_by_root(self, direction: OrderDirection = "asc") -> Self:
        """Order by root value."""
        return self.order_by("root", direction)

    def _for_pool(self, pool: int | str, network: str) -> Self:
        return self.clone().by_network(network).by_pool(pool, network)

    async def get_pool_root_history(self, pool: int | str, network: str) -> list[MerkleRoot]:
        """Every root of a pool in index order."""
        return await self._for_pool(pool, network).order_by_index("asc").execute()

    async def get_valid_root_indices(self, pool: int | str, network: str) -> list[RootIndexEntry]:
        """Index, root and creation time for every root of a pool."""
        roots = await self._for_pool(pool, network).order_by_index("asc").execute()
        return [_index_entry(record) for record in roots]

    async def find_root_index(
        self, pool: int | str, network: str, root: int | str
    ) -> RootIndexEntry | None:
        """Locate ``root`` in a pool's history."""
        record = await self._for_pool(pool, network).by_root(root).first()
        return None if record is None else _index_entry(record)

    async def is_valid_root(self, pool: int | str, network: str, root: int | str) -> bool:
        """Return whether ``root`` appears in the pool's history."""
        return await self.find_root_index(pool, network, root) is not None

    async def get_latest_root(self, pool: int | str, network: str) -> MerkleRoot | None:
        """Root with the highest index."""
        return await self._for_pool(pool, network).order_by_index("desc").first()

    async def get_root_at_index(
        self, pool: int | str, network: str, root_index: int
    ) -> MerkleRoot | None:
        """Root stored at ``root_index``."""
        return await self._for_pool(pool, network).at_index(root_index).first()

    async def get_root_range(
        self, pool: int | str, network: str, start_index: int, end_index: int
    ) -> list[MerkleRoot]:
        """Contiguous slice of the history, inclusive on both ends, in index order."""
        return await (
            self._for_pool(pool, network)
            .with_min_index(start_index)
            .with_max_index(end_index)
            .order_by_index("asc")
            .execute()
        )

    async def get_root_statistics(self, pool: int | str, network: str) -> RootStatistics:
        """
        Timing statistics over a pool's root history.

        Returns
        -------
        RootStatistics
            ``oldest_root``/``newest_root`` are ``"N/A"`` for an empty history, the
            average gap is rounded to whole seconds and the creation rate is roots per
            day rounded to two decimals.
        """
        roots = await self._for_pool(pool, network).order_by_creation("asc").execute()
        if not roots:
            return RootStatistics(0, 0, NOT_AVAILABLE, NOT_AVAILABLE, 0, 0.0)
        timestamps = [aggregators.field_value(record, "createdAtTimestamp") for record in roots]
        span = timestamps[-1] - timestamps[0]
        average_gap = round(span / (len(roots) - 1)) if len(roots) > 1 else 0
        creation_rate = (
            round(len(roots) / span * aggregators.SECONDS_PER_DAY, aggregators.DISPLAY_PRECISION)
            if span > 0
            else 0.0
        )
        return RootStatistics(
            total_roots=len(roots),
            latest_index=max(int(record.get("rootIndex", 0)) for record in roots),
            oldest_root=str(roots[0].get("root", NOT_AVAILABLE)),
            newest_root=str(roots[-1].get("root", NOT_AVAILABLE)),
            average_time_between_roots=average_gap,
            root_creation_rate=creation_rate,
        )
