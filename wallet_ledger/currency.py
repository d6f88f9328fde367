"""
Amount Handling Module

Parses and validates monetary amounts for the single implicit ledger
currency. NEVER uses float for monetary values: every balance and amount is a
Decimal quantized to the configured number of minor-unit places.
"""

from decimal import Decimal, Inexact, InvalidOperation, Rounded, getcontext, localcontext
from typing import Union

from .errors import InvalidAmount

# Set global decimal context for financial precision
getcontext().prec = 28

DEFAULT_PRECISION = 2  # Cents

AmountLike = Union[Decimal, str, int, float]


def minor_unit(precision: int = DEFAULT_PRECISION) -> Decimal:
    """Smallest representable amount for a precision, e.g. Decimal('0.01')"""
    return Decimal(1).scaleb(-precision)


def to_amount(value: AmountLike, precision: int = DEFAULT_PRECISION) -> Decimal:
    """
    Convert a caller-supplied value into an exact ledger amount

    Args:
        value: Decimal, int, numeric string, or float (converted via str)
        precision: Number of minor-unit decimal places

    Returns:
        Decimal quantized to the precision

    Raises:
        InvalidAmount: If the value is not a finite number or carries more
            decimal places than the precision allows
    """
    if isinstance(value, bool):
        raise InvalidAmount(value, "amount must be numeric")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = _parse(str(value), value)
    elif isinstance(value, str):
        amount = _parse(value.strip(), value)
    else:
        raise InvalidAmount(value, "amount must be numeric")

    if not amount.is_finite():
        raise InvalidAmount(value, "amount must be finite")

    try:
        quantized = amount.quantize(minor_unit(precision))
    except InvalidOperation:
        raise InvalidAmount(value, "amount is too large") from None
    if quantized != amount:
        raise InvalidAmount(value, f"amount has more than {precision} decimal places")
    return quantized


def to_positive_amount(value: AmountLike, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Convert to an amount that must be strictly greater than zero"""
    amount = to_amount(value, precision)
    if amount <= Decimal('0'):
        raise InvalidAmount(value, "amount must be positive")
    return amount


def to_non_negative_amount(value: AmountLike, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Convert to an amount that may be zero but never negative"""
    amount = to_amount(value, precision)
    if amount < Decimal('0'):
        raise InvalidAmount(value, "amount must not be negative")
    return amount


def add_exact(balance: Decimal, delta: Decimal, value: AmountLike) -> Decimal:
    """
    Add delta to a balance without rounding

    Raises:
        InvalidAmount: If the result does not fit the decimal context precision
    """
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        ctx.traps[Rounded] = True
        try:
            return balance + delta
        except (Inexact, Rounded, InvalidOperation):
            raise InvalidAmount(value, "resulting balance exceeds supported precision") from None


def _parse(text: str, original) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise InvalidAmount(original, "amount is not a number") from None
