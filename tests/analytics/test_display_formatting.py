"""Tests for display renderings of exact integer values."""

from __future__ import annotations

from paymaster_data.analytics.formatting import (
    INVALID_DATE,
    format_currency,
    format_date,
    format_datetime,
    format_gas,
    format_percentage_change,
    format_units,
)
from tests._helpers.expect import expect_equal


def test_format_units_truncates_and_strips_zeros() -> None:
    """Fixed-point values render without trailing zeros or rounding up."""
    expect_equal(format_units(1_500_000_000_000_000_000), "1.5", label="1.5 ether")
    expect_equal(format_units("0"), "0", label="zero")
    expect_equal(format_units(-(10**18)), "-1", label="negative")
    expect_equal(format_units(123_456_789, decimals=6, precision=2), "123.45", label="usdc")
    expect_equal(format_units(10**60), str(10**42), label="huge")


def test_format_gas_and_currency() -> None:
    """Gas uses thousands separators and currency appends a symbol."""
    expect_equal(format_gas("1234567"), "1,234,567", label="gas")
    expect_equal(format_currency(10**18), "1 ETH", label="ether")
    expect_equal(format_currency(25 * 10**4, "USDC", 6), "0.25 USDC", label="usdc")


def test_format_percentage_change() -> None:
    """Changes are signed with two decimals and special cases for zero baselines."""
    expect_equal(format_percentage_change(150, 100), "+50.00%", label="growth")
    expect_equal(format_percentage_change(50, 100), "-50.00%", label="decline")
    expect_equal(format_percentage_change(5, 0), "+∞%", label="from zero")
    expect_equal(format_percentage_change(0, 0), "0%", label="flat zero")


def test_format_date_and_datetime_use_utc() -> None:
    """Timestamps render as UTC calendar values."""
    expect_equal(format_date("1704067200"), "2024-01-01", label="date")
    expect_equal(format_datetime(1_704_070_861), "2024-01-01 01:01:01 UTC", label="datetime")


def test_format_date_and_datetime_tolerate_out_of_range_values() -> None:
    """Timestamps outside the calendar range render a placeholder instead of raising."""
    expect_equal(format_date("99999999999999999999"), INVALID_DATE, label="date")
    expect_equal(format_datetime(10**20), INVALID_DATE, label="datetime")
