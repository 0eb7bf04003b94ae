"""Tests for per-network aggregate queries."""

from __future__ import annotations

import anyio

from paymaster_data.query.builders import (
    NetworkComparison,
    NetworkInfoQueryBuilder,
    NetworkStatistics,
)
from tests._helpers.expect import expect_equal, expect_true
from tests._helpers.fakes import RecordingTransport, envelope

NETWORKS = (
    {
        "name": "base-sepolia",
        "chainId": "84532",
        "totalPaymasters": "3",
        "totalPools": "2",
        "totalMembers": "7",
        "totalUserOperations": "10",
        "totalGasSpent": "1000",
        "totalRevenue": "100",
    },
    {
        "name": "empty-net",
        "chainId": "1",
        "totalPaymasters": "0",
        "totalPools": "0",
        "totalMembers": "0",
        "totalUserOperations": "20",
        "totalGasSpent": "0",
        "totalRevenue": "50",
    },
)


def test_default_order_is_name_ascending(transport: RecordingTransport) -> None:
    """Networks list alphabetically unless reordered."""
    rendered = NetworkInfoQueryBuilder(transport).by_chain_id(84532).render()
    expect_true("orderBy: name, orderDirection: asc" in rendered.query, message=rendered.query)
    expect_equal(rendered.variables["chainId"], "84532", label="chain id")


def test_network_statistics_pick_leaders() -> None:
    """Totals sum across networks and name the most active and profitable."""
    fake = RecordingTransport(responses=[envelope("networkInfos", *NETWORKS)])
    stats = anyio.run(NetworkInfoQueryBuilder(fake).get_network_statistics)
    expect_equal(
        stats,
        NetworkStatistics(
            total_networks=2,
            total_paymasters="3",
            total_pools="2",
            total_members="7",
            total_user_operations="30",
            total_gas_spent="1000",
            total_revenue="150",
            most_active_network="empty-net",
            most_profitable_network="base-sepolia",
        ),
    )


def test_network_statistics_of_nothing(transport: RecordingTransport) -> None:
    """No networks report ``N/A`` leaders."""
    stats = anyio.run(NetworkInfoQueryBuilder(transport).get_network_statistics)
    expect_equal(stats.most_active_network, "N/A", label="active")
    expect_equal(stats.most_profitable_network, "N/A", label="profitable")


def test_network_comparison_truncates_and_guards_zero() -> None:
    """Per-unit averages truncate and zero denominators yield zero."""
    fake = RecordingTransport(responses=[envelope("networkInfos", *NETWORKS)])
    comparison = anyio.run(NetworkInfoQueryBuilder(fake).get_network_comparison)
    expect_equal(
        comparison[0],
        NetworkComparison(
            network_name="base-sepolia",
            chain_id="84532",
            total_paymasters="3",
            total_pools="2",
            total_members="7",
            total_user_operations="10",
            total_gas_spent="1000",
            total_revenue="100",
            avg_revenue_per_paymaster="33",
            avg_members_per_pool="3",
            utilization_rate="142",
        ),
    )
    expect_equal(
        (
            comparison[1].avg_revenue_per_paymaster,
            comparison[1].avg_members_per_pool,
            comparison[1].utilization_rate,
        ),
        ("0", "0", "0"),
    )
