"""
Currency Arithmetic

Menu prices arrive from the server as decimal numbers in major units
(e.g. 49.5 rupees). All totals are computed on integer minor units so
repeated additions never drift; amounts are only turned back into
two-place major units when they leave the library in a request body.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

MINOR_UNITS = 100

Amount = Union[int, float, str, Decimal]


def to_minor_units(amount: Amount) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Floats go through their shortest string form so ``0.1`` becomes
    exactly 10 minor units rather than 10.000000000000000555.

    Raises:
        ValueError: If the amount is not a number or is negative
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount: {amount!r}")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {amount!r}")
    minor = (value * MINOR_UNITS).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def from_minor_units(minor: int) -> Decimal:
    """Convert integer minor units back to a two-place Decimal."""
    return (Decimal(minor) / MINOR_UNITS).quantize(Decimal("0.01"))


def to_wire_amount(minor: int) -> float:
    """
    JSON number for a request body.

    The value always has at most two decimal places, so the float's
    shortest repr is exact.
    """
    return float(from_minor_units(minor))


def format_amount(minor: int, currency: str = "INR") -> str:
    """Human readable amount, e.g. ``INR 100.50``."""
    return f"{currency} {from_minor_units(minor)}"
