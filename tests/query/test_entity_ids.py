"""Tests for composite entity identifiers."""

from __future__ import annotations

from paymaster_data.query.ids import merkle_root_id, paymaster_id, pool_id, transaction_id
from tests._helpers.expect import expect_equal


def test_composite_ids_join_natural_keys() -> None:
    """Identifiers join network and keys with dashes; hex parts are lowercased."""
    expect_equal(paymaster_id("base-sepolia", "0xAbC"), "base-sepolia-0xabc", label="paymaster")
    expect_equal(pool_id("base-sepolia", 12), "base-sepolia-12", label="pool")
    expect_equal(transaction_id("base-sepolia", "0xFF"), "base-sepolia-0xff", label="transaction")
    expect_equal(merkle_root_id("base-sepolia", 12, 3), "base-sepolia-12-3", label="root")
