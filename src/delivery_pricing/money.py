"""Money helpers.

All amounts inside the engine are integer cents. Dollar values coming from
configuration files or callers go through :class:`decimal.Decimal` built from
their string form, so ``0.1`` stays ``0.1`` and never becomes a binary float.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
ONE = Decimal("1")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal via its string form."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric amount")
    return Decimal(str(value))


def round_cents(value: Decimal) -> int:
    """Round a fractional cent amount half-up to whole cents."""
    return int(value.quantize(ONE, rounding=ROUND_HALF_UP))


def to_cents(dollars: Number) -> int:
    """Convert a dollar amount to integer cents, rounding half-up.

    Examples:
        >>> to_cents("42.50")
        4250
        >>> to_cents(0.005)
        1
    """
    return round_cents(to_decimal(dollars) * 100)


def to_dollars(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal dollar amount."""
    return (Decimal(cents) / 100).quantize(CENT, rounding=ROUND_HALF_UP)
