"""
Financial data types for ledger calculations.

Cash, quantities and prices are held as ``Decimal`` so that buying a lot and
selling the same lot at the same price restores the cash balance exactly.

IMPORTANT CONVERSION RULES:
- Floats are converted through ``repr``, so ``0.1`` becomes ``Decimal("0.1")``
  rather than its binary expansion
- ``to_decimal`` is strict and raises InvalidInputError on junk input
- ``coerce_decimal`` is lenient and maps junk or missing values to NaN, which
  is what the integrity auditor needs when reading stored documents
- Ordering comparisons against NaN raise, so check ``is_finite`` first
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from trading_ledger.core.enums import TradeDirection
from trading_ledger.core.exceptions.ledger import InvalidInputError

# Common financial values as Decimal constants
ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
NAN = Decimal("NaN")

Numeric = Decimal | float | int | str


def to_decimal(value: Numeric) -> Decimal:
    """Convert various numeric types to Decimal.

    Args:
        value: Numeric value to convert

    Returns:
        Decimal representation of the value (may be NaN or infinite)

    Raises:
        InvalidInputError: If the value is not numeric

    Examples:
        >>> to_decimal(50000)
        Decimal('50000')
        >>> to_decimal(0.1)
        Decimal('0.1')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidInputError(f"Not a numeric value: {value!r}")
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidInputError(f"Not a numeric value: {value!r}") from e


def coerce_decimal(value: Any) -> Decimal:
    """Convert a possibly corrupted stored value to Decimal, mapping junk to NaN."""
    if value is None:
        return NAN
    try:
        return to_decimal(value)
    except InvalidInputError:
        return NAN


def is_finite(value: Any) -> bool:
    """Check that a value is present, numeric and finite."""
    return coerce_decimal(value).is_finite()


def is_positive_finite(value: Any) -> bool:
    """Check that a value is numeric, finite and strictly positive."""
    number = coerce_decimal(value)
    return number.is_finite() and number > ZERO


def is_non_negative_finite(value: Any) -> bool:
    """Check that a value is numeric, finite and zero or positive."""
    number = coerce_decimal(value)
    return number.is_finite() and number >= ZERO


def calculate_pnl(
    entry_price: Decimal,
    exit_price: Decimal,
    size: Decimal,
    direction: TradeDirection,
) -> Decimal:
    """Calculate PnL of a directional position.

    Args:
        entry_price: Average entry price of the position
        exit_price: Exit (or current market) price
        size: Position size (absolute value)
        direction: BUY for a long book, SELL for a short book

    Returns:
        PnL as Decimal
    """
    amount = abs(size)
    if direction.is_long:
        return (exit_price - entry_price) * amount
    return (entry_price - exit_price) * amount


def calculate_margin(size: Decimal, leverage: Decimal) -> Decimal:
    """Calculate margin set aside for a leveraged position.

    Args:
        size: Position size
        leverage: Leverage multiplier

    Returns:
        Required margin, ``size / leverage``

    Raises:
        InvalidInputError: If leverage is not positive
    """
    if not leverage.is_finite() or leverage <= ZERO:
        raise InvalidInputError(f"Leverage must be positive, got {leverage}")
    return size / leverage


def weighted_average_price(
    held_quantity: Decimal, held_avg_price: Decimal, quantity: Decimal, price: Decimal
) -> Decimal:
    """Running average entry price after adding ``quantity`` at ``price``.

    Examples:
        >>> weighted_average_price(Decimal(10), Decimal(100), Decimal(10), Decimal(200))
        Decimal('150')
    """
    total_quantity = held_quantity + quantity
    if total_quantity <= ZERO:
        raise InvalidInputError(f"Invalid position averaging: total quantity {total_quantity}")
    return (held_quantity * held_avg_price + quantity * price) / total_quantity


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """Express ``part`` as a percentage of ``whole`` (0 when whole is zero)."""
    if whole == ZERO:
        return ZERO
    return part / whole * HUNDRED
