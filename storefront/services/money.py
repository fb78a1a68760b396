"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout. Cart totals are
summed from Decimal line totals so repeated increments never drift.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

Number = Union[str, int, float, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    if isinstance(value, bool):
        return Decimal("0")

    try:
        if isinstance(value, float):
            # Go through repr to keep 0.1 as 0.1 instead of its binary expansion
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_decimal(value: Number) -> Decimal:
    """
    Strict variant of to_decimal for persisted data.

    Raises:
        ValueError: if the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a monetary value: {value!r}")
    try:
        result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"not a monetary value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"not a monetary value: {value!r}")
    return result


def round_money(value: Number) -> Decimal:
    """Round monetary value to two decimal places."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def total(values: Iterable[Number]) -> Decimal:
    """Sum of monetary values; Decimal("0") for an empty iterable."""
    result = Decimal("0")
    for value in values:
        result += to_decimal(value)
    return result


def format_money(value: Number, currency: str = "INR") -> str:
    """
    Format monetary value with currency symbol.

    Args:
        value: Value to format
        currency: Currency code (INR, USD, EUR, GBP)

    Returns:
        Formatted string with currency symbol
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    formatted = f"{round_money(value):,.2f}"
    if currency in CURRENCY_SYMBOLS:
        return f"{symbol}{formatted}"
    return f"{formatted} {symbol}"
