"""Tests for pool membership queries."""

from __future__ import annotations

import anyio

from paymaster_data.query.builders import MemberQueryBuilder, MemberStats
from tests._helpers.expect import expect_equal, expect_true
from tests._helpers.fakes import RecordingTransport, envelope


def test_pool_filter_targets_the_pool_relation(transport: RecordingTransport) -> None:
    """The numeric pool id filters through the nested pool relation."""
    rendered = MemberQueryBuilder(transport).in_pool(3).nullifier_used(used=False).render()
    expect_true("pool_: {poolId: $poolId}" in rendered.query, message=rendered.query)
    expect_equal(rendered.variables["poolId"], "3", label="poolId")
    expect_equal(rendered.variables["nullifierUsed"], False, label="flag")


def test_is_member_combines_network_pool_and_identity() -> None:
    """Membership checks combine all three keys in one single-row query."""
    fake = RecordingTransport(responses=[envelope("poolMembers", {"id": "m"})])
    found = anyio.run(MemberQueryBuilder(fake).is_member, "base-sepolia", 1, 12345)

    expect_true(found, message="member should be found")
    expect_equal(
        {key: fake.last_variables[key] for key in ("network", "poolId", "identityCommitment")},
        {"network": "base-sepolia", "poolId": "1", "identityCommitment": "12345"},
    )


def test_member_stats_match_documented_example() -> None:
    """Gas values 100, 250 and 0 total 350 with a truncated mean of 116."""
    fake = RecordingTransport(
        responses=[
            envelope(
                "poolMembers",
                {"id": "a", "gasUsed": "100", "nullifierUsed": False},
                {"id": "b", "gasUsed": "250", "nullifierUsed": False},
                {"id": "c", "gasUsed": "0", "nullifierUsed": True},
            )
        ]
    )
    stats = anyio.run(MemberQueryBuilder(fake).get_member_stats)
    expect_equal(
        stats,
        MemberStats(
            total_members=3,
            members_with_gas_used=2,
            total_gas_used="350",
            average_gas_used="116",
            nullifiers_used=1,
            usage_rate=100.0,
        ),
    )


def test_member_stats_of_nothing_is_zero(transport: RecordingTransport) -> None:
    """An empty selection yields zero totals without dividing by zero."""
    stats = anyio.run(MemberQueryBuilder(transport).get_member_stats)
    expect_equal(stats, MemberStats(0, 0, "0", "0", 0, 0.0))
