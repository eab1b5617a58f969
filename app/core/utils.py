"""Core utility functions for the application"""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to naive UTC.

    Aware values are converted to UTC first; naive values are assumed to
    already be UTC and are returned unchanged.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_decimal(amount: Union[Decimal, float, int, None]) -> Decimal:
    """Coerce a numeric amount to Decimal without binary float artefacts."""
    if amount is None:
        return Decimal("0")
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def round_money(amount: Union[Decimal, float, int, None]) -> Decimal:
    """
    Round a currency amount to 2 decimal places, halves away from zero.

    Examples:
        round_money(Decimal("58.335")) -> Decimal("58.34")
        round_money(-2.005) -> Decimal("-2.01")
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_chart_date(value: Union[date, datetime]) -> str:
    """Format a date for chart buckets (YYYY-MM-DD)."""
    return value.strftime("%Y-%m-%d")


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)
