"""Tests for the decimal-string integer codec."""

from __future__ import annotations

import logging

import pytest

from paymaster_data.numeric.codec import (
    decode,
    decode_by_field_list,
    encode,
    encode_structural,
)
from tests._helpers.expect import expect_equal, expect_logged, expect_true

UINT256_MAX = 2**256 - 1


def test_encode_renders_exact_decimal_strings() -> None:
    """Integers of any magnitude encode without loss; other values pass through."""
    expect_equal(encode(UINT256_MAX), str(UINT256_MAX), label="uint256")
    expect_equal(encode(-5), "-5", label="negative")
    expect_equal(encode(3.9), "3", label="float floored")
    expect_equal(encode("12"), "12", label="string passthrough")
    expect_equal(encode(True), True, label="bool untouched")


def test_decode_parses_decimal_and_prefixed_literals() -> None:
    """Decimal, hex and padded literals decode to exact integers."""
    expect_equal(decode(str(UINT256_MAX)), UINT256_MAX, label="uint256")
    expect_equal(decode(" 42 "), 42, label="padded")
    expect_equal(decode("0x1f"), 31, label="hex")
    expect_equal(decode(""), 0, label="empty")
    expect_equal(decode(7), 7, label="int")


def test_decode_logs_and_returns_zero_for_garbage(caplog: pytest.LogCaptureFixture) -> None:
    """Unparseable input becomes zero with a warning instead of raising."""
    caplog.set_level(logging.WARNING, logger="paymaster_data.numeric")
    expect_equal(decode("abc"), 0, label="letters")
    expect_equal(decode("1_000"), 0, label="digit separators")
    expect_equal(decode(None), 0, label="none")
    expect_logged(caplog, "Failed to parse integer value", level="WARNING")


def test_encode_structural_rewrites_nested_integers_only() -> None:
    """Only integer leaves change; booleans, strings and None keep their type."""
    record = {
        "amount": 10,
        "label": "pool",
        "active": False,
        "missing": None,
        "nested": {"ids": [1, 2], "flag": True},
    }
    expect_equal(
        encode_structural(record),
        {
            "amount": "10",
            "label": "pool",
            "active": False,
            "missing": None,
            "nested": {"ids": ["1", "2"], "flag": True},
        },
    )


def test_decode_by_field_list_converts_allow_listed_keys_at_any_depth() -> None:
    """Allow-listed string leaves decode; identifiers and hashes stay strings."""
    wire = {
        "id": "base-sepolia-1",
        "memberCount": "12",
        "transactionHash": "0xabc",
        "pool": {"id": "base-sepolia-1", "poolId": "1"},
        "history": [{"poolId": "2"}, {"poolId": "3"}],
    }
    decoded = decode_by_field_list(wire, ["memberCount", "poolId"])
    expect_equal(
        decoded,
        {
            "id": "base-sepolia-1",
            "memberCount": 12,
            "transactionHash": "0xabc",
            "pool": {"id": "base-sepolia-1", "poolId": 1},
            "history": [{"poolId": 2}, {"poolId": 3}],
        },
    )


def test_decode_by_field_list_keeps_absent_keys_absent() -> None:
    """Decoding never invents keys that the wire record did not carry."""
    decoded = decode_by_field_list({"id": "x"}, frozenset({"gasUsed"}))
    expect_true(decoded == {"id": "x"}, message=f"unexpected keys in {decoded!r}")


@pytest.mark.parametrize("value", [0, 1, 2**64, UINT256_MAX])
def test_decode_restores_encoded_integers(value: int) -> None:
    """Encoding then decoding an integer gives back the same value."""
    expect_equal(decode(encode(value)), value, label=f"value {value}")


def test_structural_encoding_reverses_with_matching_field_list() -> None:
    """A record survives structural encoding when every integer leaf is allow-listed."""
    record = {
        "id": "base-sepolia-7",
        "poolId": 7,
        "totalDeposits": UINT256_MAX,
        "isActive": True,
        "paymaster": {"address": "0xabc", "revenue": 2**64},
        "members": [{"memberIndex": 0, "identityCommitment": 12}],
    }
    allow = {"poolId", "totalDeposits", "revenue", "memberIndex", "identityCommitment"}

    restored = decode_by_field_list(encode_structural(record), allow)

    expect_equal(restored, record, label="restored record")
