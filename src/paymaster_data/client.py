"""Client facade: one entry point handing out entity builders over a shared transport."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Self, cast

from paymaster_data.config.models import ClientConfig
from paymaster_data.config.networks import (
    NetworkConfig,
    get_network_preset,
    require_network_preset,
)
from paymaster_data.query.builders import (
    DailyGlobalStatsQueryBuilder,
    DailyPoolStatsQueryBuilder,
    MemberQueryBuilder,
    MerkleRootQueryBuilder,
    NetworkInfoQueryBuilder,
    NullifierUsageQueryBuilder,
    PaymasterQueryBuilder,
    PoolQueryBuilder,
    TransactionQueryBuilder,
    WithdrawalQueryBuilder,
)
from paymaster_data.query.config import QueryLimits
from paymaster_data.query.observability import QueryObservability
from paymaster_data.transport import (
    DEFAULT_TIMEOUT_SECONDS,
    DataEnvelope,
    HttpTransport,
    QueryTransport,
)

LOG = logging.getLogger("paymaster_data.client")


class SubgraphClient:
    """
    Facade over one subgraph endpoint.

    Every builder created here shares the client's transport, page-size limits and
    observability settings; builders never share configuration with each other.

    Parameters
    ----------
    transport:
        Async callable executing query documents.
    network:
        Network metadata of the indexed chain, when known.
    limits:
        Default and safe maximum page sizes.
    observability:
        Per-call structured logging settings.
    """

    def __init__(
        self,
        transport: QueryTransport,
        *,
        network: NetworkConfig | None = None,
        limits: QueryLimits | None = None,
        observability: QueryObservability | None = None,
    ) -> None:
        self._transport = transport
        self._network = network
        self._limits = limits or QueryLimits()
        self._observability = observability

    @classmethod
    def create_for_network(
        cls,
        chain_id: int,
        subgraph_url: str | None = None,
        timeout: float | None = None,
    ) -> SubgraphClient:
        """
        Build a client for a supported chain over HTTP.

        Parameters
        ----------
        chain_id:
            EVM chain id with a registered preset.
        subgraph_url:
            Endpoint overriding the preset's default subgraph URL.
        timeout:
            HTTP timeout in seconds.

        Returns
        -------
        SubgraphClient
            Client owning a new :class:`HttpTransport`.

        Raises
        ------
        errors.UnsupportedNetworkError
            When ``chain_id`` has no preset.
        """
        preset = require_network_preset(chain_id)
        transport = HttpTransport(
            url=subgraph_url or preset.default_subgraph_url,
            timeout=DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout,
        )
        LOG.debug("Created subgraph client for %s at %s", preset.network.name, transport.url)
        return cls(transport, network=preset.network)

    @classmethod
    def from_config(cls, config: ClientConfig) -> SubgraphClient:
        """
        Build a client from validated settings.

        Returns
        -------
        SubgraphClient
            Client owning a new :class:`HttpTransport` with the configured limits and
            query logging.
        """
        preset = get_network_preset(config.chain_id)
        transport = HttpTransport(url=str(config.subgraph_url), timeout=config.timeout_seconds)
        return cls(
            transport,
            network=None if preset is None else preset.network,
            limits=QueryLimits.from_config(config),
            observability=QueryObservability(enabled=config.log_queries),
        )

    @property
    def network(self) -> NetworkConfig | None:
        """Metadata of the indexed network, when the client was built from a preset."""
        return self._network

    @property
    def transport(self) -> QueryTransport:
        """Transport shared by every builder of this client."""
        return self._transport

    @property
    def limits(self) -> QueryLimits:
        """Page-size limits applied to every builder."""
        return self._limits

    def paymasters(self) -> PaymasterQueryBuilder:
        """New builder over paymaster contracts."""
        return PaymasterQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def pools(self) -> PoolQueryBuilder:
        """New builder over pools."""
        return PoolQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def members(self) -> MemberQueryBuilder:
        """New builder over pool memberships."""
        return MemberQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def merkle_roots(self) -> MerkleRootQueryBuilder:
        """New builder over merkle root history."""
        return MerkleRootQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def transactions(self) -> TransactionQueryBuilder:
        """New builder over sponsored user operations."""
        return TransactionQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def withdrawals(self) -> WithdrawalQueryBuilder:
        """New builder over revenue withdrawals."""
        return WithdrawalQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def nullifier_usages(self) -> NullifierUsageQueryBuilder:
        """New builder over nullifier usage."""
        return NullifierUsageQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def daily_pool_stats(self) -> DailyPoolStatsQueryBuilder:
        """New builder over per-pool daily statistics."""
        return DailyPoolStatsQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def daily_global_stats(self) -> DailyGlobalStatsQueryBuilder:
        """New builder over network-wide daily statistics."""
        return DailyGlobalStatsQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    def network_infos(self) -> NetworkInfoQueryBuilder:
        """New builder over per-network aggregates."""
        return NetworkInfoQueryBuilder(
            self._transport, limits=self._limits, observability=self._observability
        )

    async def execute(
        self, query: str, variables: dict[str, object] | None = None
    ) -> DataEnvelope:
        """Run a raw query document through the transport and return its data envelope."""
        return await self._transport(query, variables or {})

    async def aclose(self) -> None:
        """Release the transport's resources when it holds any."""
        closer = getattr(self._transport, "aclose", None)
        if closer is not None:
            await cast("Callable[[], Awaitable[None]]", closer)()

    def close(self) -> None:
        """Release the transport's resources from synchronous code."""
        closer = getattr(self._transport, "close", None)
        if closer is not None:
            cast("Callable[[], None]", closer)()

    async def __aenter__(self) -> Self:
        """Return the client for use in ``async with``."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the transport when leaving the context."""
        await self.aclose()
