"""Crypto to fiat conversion."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

_CENTS = Decimal("0.01")


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats convert to their shortest repr, not binary noise
    return Decimal(str(value))


def to_local_currency(amount: Number, rate: Number) -> Decimal:
    """Fiat value of `amount` crypto units at `rate`."""
    return _as_decimal(amount) * _as_decimal(rate)


def format_local_currency(amount: Number, rate: Number) -> str:
    """Fiat value with exactly two decimal places, e.g. '1200.00'."""
    value = to_local_currency(amount, rate).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{value:.2f}"
