"""Per-entity query builders over the paymaster subgraph collections."""

from __future__ import annotations

from paymaster_data.query.builders.daily_global_stats import (
    AggregatedStats,
    DailyGlobalStatsQueryBuilder,
    GlobalPeakDay,
)
from paymaster_data.query.builders.daily_pool_stats import (
    DailyPoolStatsQueryBuilder,
    GrowthRates,
    PoolPeakDay,
    PoolPerformanceStats,
    PoolUtilizationMetrics,
    UtilizationTrend,
)
from paymaster_data.query.builders.member import MemberQueryBuilder, MemberStats
from paymaster_data.query.builders.merkle_root import (
    MerkleRootQueryBuilder,
    RootIndexEntry,
    RootStatistics,
)
from paymaster_data.query.builders.network_info import (
    NetworkComparison,
    NetworkInfoQueryBuilder,
    NetworkStatistics,
)
from paymaster_data.query.builders.nullifier_usage import (
    NullifierUsageQueryBuilder,
    UsageStats,
    usage_stats,
)
from paymaster_data.query.builders.paymaster import PaymasterQueryBuilder, RevenueSummary
from paymaster_data.query.builders.pool import PoolQueryBuilder, PoolStats
from paymaster_data.query.builders.transaction import (
    GasStatistics,
    SenderActivity,
    TimelineEntry,
    TransactionQueryBuilder,
)
from paymaster_data.query.builders.withdrawal import WithdrawalQueryBuilder, WithdrawalSummary

__all__ = [
    "AggregatedStats",
    "DailyGlobalStatsQueryBuilder",
    "DailyPoolStatsQueryBuilder",
    "GasStatistics",
    "GlobalPeakDay",
    "GrowthRates",
    "MemberQueryBuilder",
    "MemberStats",
    "MerkleRootQueryBuilder",
    "NetworkComparison",
    "NetworkInfoQueryBuilder",
    "NetworkStatistics",
    "NullifierUsageQueryBuilder",
    "PaymasterQueryBuilder",
    "PoolPeakDay",
    "PoolPerformanceStats",
    "PoolQueryBuilder",
    "PoolStats",
    "PoolUtilizationMetrics",
    "RevenueSummary",
    "RootIndexEntry",
    "RootStatistics",
    "SenderActivity",
    "TimelineEntry",
    "TransactionQueryBuilder",
    "UsageStats",
    "UtilizationTrend",
    "WithdrawalQueryBuilder",
    "WithdrawalSummary",
    "usage_stats",
]
