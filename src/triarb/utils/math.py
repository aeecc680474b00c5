"""
Decimal utilities for trading calculations.

Provides precision-safe operations for price and quantity calculations,
handling the specific requirements of exchange trading systems.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final


ZERO: Final[Decimal] = Decimal(0)
ONE: Final[Decimal] = Decimal(1)
HUNDRED: Final[Decimal] = Decimal(100)

# Fractional digits used for amounts, fees and rates
AMOUNT_PLACES: Final[int] = 8


def to_decimal(value: object, default: Decimal | None = None) -> Decimal | None:
    """
    Convert an exchange value to Decimal.

    Floats go through ``str`` so that ``0.1`` stays ``0.1`` instead of
    its binary expansion.

    Args:
        value: Number, numeric string or None.
        default: Value returned when conversion is impossible.

    Returns:
        Decimal value or default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def quantize(value: Decimal, places: int = AMOUNT_PLACES) -> Decimal:
    """
    Round half-up to a fixed number of fractional digits.

    Example:
        >>> quantize(Decimal("1.234567895"))
        Decimal('1.23456790')
    """
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def truncate(value: Decimal, places: int) -> Decimal:
    """
    Truncate to a fixed number of fractional digits (never rounds up).

    Uses truncation so an order never exceeds the available amount.

    Example:
        >>> truncate(Decimal("1.239"), 2)
        Decimal('1.23')
    """
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)


def precision_places(
    value: object,
    tick_size: bool = False,
    default: int = AMOUNT_PLACES,
) -> int:
    """
    Normalize an exchange precision value to a count of decimal places.

    Exchanges report precision either as a number of decimal places
    (``2``) or as a tick/step size (``0.01``). Both map to ``2``. Zero
    places means whole units; a tick maps to the digits it needs, so
    ``0.25`` gives ``2`` and ``10`` gives ``0``.

    Args:
        value: Raw precision value.
        tick_size: Whether the value is a tick size rather than places.
        default: Places used when the value is missing or invalid.

    Returns:
        Number of fractional digits.
    """
    step = to_decimal(value)
    if step is None or step < 0:
        return default

    if not tick_size and step == step.to_integral_value():
        return int(step)

    if step == 0:
        return default

    exponent = step.normalize().as_tuple().exponent
    return max(0, -int(exponent))


def truncate_to_step(value: Decimal, step: Decimal) -> Decimal:
    """
    Round down to a multiple of a tick size.

    Example:
        >>> truncate_to_step(Decimal("7.9"), Decimal("0.25"))
        Decimal('7.75')
    """
    if step <= 0:
        return value
    return (value / step).to_integral_value(rounding=ROUND_DOWN) * step


def format_rate(rate: Decimal, places: int = 4) -> str:
    """
    Format a percentage rate for display.

    Args:
        rate: Rate as percentage.
        places: Fractional digits.

    Returns:
        Formatted string with sign.

    Example:
        >>> format_rate(Decimal("0.5"))
        '+0.5000%'
    """
    sign = "+" if rate >= 0 else ""
    return f"{sign}{rate:.{places}f}%"
