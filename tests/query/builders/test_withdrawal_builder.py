"""Tests for revenue withdrawal queries."""

from __future__ import annotations

import anyio

from paymaster_data.query.builders import WithdrawalQueryBuilder, WithdrawalSummary
from tests._helpers.expect import expect_equal, expect_true
from tests._helpers.fakes import RecordingTransport, envelope


def test_time_filters_use_strict_and_inclusive_bounds(transport: RecordingTransport) -> None:
    """after/before are strict while between is inclusive."""
    strict = WithdrawalQueryBuilder(transport).withdrawn_after(10).withdrawn_before(20)
    inclusive = WithdrawalQueryBuilder(transport).withdrawn_between(10, 20)

    expect_equal(
        dict(strict.config.where),
        {"withdrawnAtTimestamp_gt": 10, "withdrawnAtTimestamp_lt": 20},
        label="strict",
    )
    expect_equal(
        dict(inclusive.config.where),
        {"withdrawnAtTimestamp_gte": 10, "withdrawnAtTimestamp_lte": 20},
        label="inclusive",
    )


def test_recipient_list_renders_as_bytes_list(transport: RecordingTransport) -> None:
    """Several recipients are matched with a lowercased ``_in`` list."""
    rendered = WithdrawalQueryBuilder(transport).by_recipients(["0xAB", "0xCD"]).render()
    expect_true("$recipient_in: [Bytes!]" in rendered.query, message=rendered.query)
    expect_equal(rendered.variables["recipient_in"], ["0xab", "0xcd"], label="recipients")


def test_paymaster_filter_targets_relation(transport: RecordingTransport) -> None:
    """Paymaster filters go through the nested paymaster relation."""
    rendered = WithdrawalQueryBuilder(transport).by_paymaster("0xPM").render()
    expect_true("paymaster_: {address: $paymasterAddress}" in rendered.query, message="relation")


def test_withdrawal_summary_counts_unique_recipients() -> None:
    """The summary totals amounts and counts distinct recipients."""
    fake = RecordingTransport(
        responses=[
            envelope(
                "revenueWithdrawals",
                {"recipient": "0xa", "amount": "5"},
                {"recipient": "0xb", "amount": "10"},
                {"recipient": "0xa", "amount": "3"},
            )
        ]
    )
    summary = anyio.run(WithdrawalQueryBuilder(fake).get_withdrawal_summary)
    expect_equal(summary, WithdrawalSummary(3, "18", "6", "10", 2))


def test_withdrawal_summary_of_nothing_is_zero(transport: RecordingTransport) -> None:
    """No withdrawals summarize to zero amounts."""
    summary = anyio.run(WithdrawalQueryBuilder(transport).get_withdrawal_summary)
    expect_equal(summary, WithdrawalSummary(0, "0", "0", "0", 0))


def test_total_withdrawn_by_recipient() -> None:
    """Recipient totals filter by the lowercased address."""
    fake = RecordingTransport(
        responses=[envelope("revenueWithdrawals", {"amount": "7"}, {"amount": "8"})]
    )
    total = anyio.run(WithdrawalQueryBuilder(fake).get_total_withdrawn_by_recipient, "0xAA")
    expect_equal(total, "15", label="total")
    expect_equal(fake.last_variables["recipient"], "0xaa", label="recipient")
