"""Human-facing renderings of exact integer values.

These helpers produce display strings only; their output is never parsed back
into arithmetic.
"""

from __future__ import annotations

from paymaster_data.analytics.aggregators import (
    DATE_FORMAT,
    percentage_change,
    utc_date,
    utc_datetime,
)
from paymaster_data.numeric.codec import decode

WEI_DECIMALS = 18
INVALID_DATE = "Invalid date"


def format_units(value: object, decimals: int = WEI_DECIMALS, precision: int = 4) -> str:
    """
    Render a fixed-point integer with ``decimals`` implied decimal places.

    The fraction is truncated to ``precision`` digits and trailing zeros are
    stripped, so ``1_500_000_000_000_000_000`` renders as ``"1.5"``.

    Returns
    -------
    str
        Decimal representation without exponent notation.
    """
    amount = decode(value)
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10**decimals)
    digits = str(fraction).rjust(decimals, "0")[:precision].rstrip("0")
    if not digits:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{digits}"


def format_gas(value: object) -> str:
    """Render a gas quantity with thousands separators."""
    return f"{decode(value):,}"


def format_currency(
    value: object, symbol: str = "ETH", decimals: int = WEI_DECIMALS, precision: int = 4
) -> str:
    """Render a wei amount followed by a currency symbol."""
    return f"{format_units(value, decimals, precision)} {symbol}"


def format_percentage_change(current: object, previous: object) -> str:
    """
    Render the change from ``previous`` to ``current`` as a signed percentage.

    Returns
    -------
    str
        ``"+∞%"`` for growth from zero, ``"0%"`` when both are zero, otherwise a
        two-decimal signed percentage such as ``"+12.50%"``.
    """
    change = percentage_change(decode(current), decode(previous))
    if change is None:
        return "+∞%"
    if change == 0 and decode(previous) == 0:
        return "0%"
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


def format_date(timestamp: object) -> str:
    """Render a unix timestamp as ``YYYY-MM-DD`` in UTC, or ``"Invalid date"``."""
    return utc_date(timestamp) or INVALID_DATE


def format_datetime(timestamp: object) -> str:
    """Render a unix timestamp as ``YYYY-MM-DD HH:MM:SS UTC``, or ``"Invalid date"``."""
    moment = utc_datetime(timestamp)
    if moment is None:
        return INVALID_DATE
    return moment.strftime(f"{DATE_FORMAT} %H:%M:%S UTC")
