"""
Decimal Math Utilities for Tax Calculations.

Bracket walks, proportional allocations and carryover arithmetic are done in
Decimal so that same inputs always produce the same outputs, down to the cent.

Why Decimal?
- Float: 0.12 * 35550 = 4265.999999999999
- Decimal: 0.12 * 35550 = 4266.00
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

# Type alias for values that can be converted to Decimal
Numeric = Union[int, float, str, Decimal]

MONEY_PLACES = Decimal("0.01")  # Round to pennies
ZERO = Decimal("0")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Floats go through str() so 0.1 becomes Decimal('0.1'), not the binary
    approximation.

    Examples:
        >>> to_decimal(100.50)
        Decimal('100.5')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def money(value: Numeric) -> Decimal:
    """
    Round to pennies, half up.

    Examples:
        >>> money(626.785)
        Decimal('626.79')
    """
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def add(*values: Numeric) -> Decimal:
    """Sum any number of values with Decimal precision."""
    result = ZERO
    for v in values:
        result += to_decimal(v)
    return result


def multiply(a: Numeric, b: Numeric) -> Decimal:
    """Multiply two values with Decimal precision."""
    return to_decimal(a) * to_decimal(b)


def divide(a: Numeric, b: Numeric, default: Optional[Numeric] = None) -> Decimal:
    """
    Divide a by b with Decimal precision.

    Args:
        a: Dividend
        b: Divisor
        default: Value to return if b is zero (None raises)

    Raises:
        InvalidOperation: If b is zero and no default provided
    """
    b_dec = to_decimal(b)
    if b_dec == 0:
        if default is not None:
            return to_decimal(default)
        raise InvalidOperation("Division by zero")
    return to_decimal(a) / b_dec


def min_decimal(*values: Numeric) -> Decimal:
    """Minimum of values as Decimal."""
    return min(to_decimal(v) for v in values)


def max_decimal(*values: Numeric) -> Decimal:
    """Maximum of values as Decimal."""
    return max(to_decimal(v) for v in values)


def to_float(value: Decimal) -> float:
    """Round to pennies and convert to float for form lines and JSON output."""
    return float(money(value))


def format_money(value: Numeric) -> str:
    """
    Format as a dollar amount, negatives in parentheses as on IRS forms.

    Examples:
        >>> format_money(1234.5)
        '$1,234.50'
        >>> format_money(-3000)
        '($3,000.00)'
    """
    amount = money(value)
    if amount < 0:
        return f"(${-amount:,.2f})"
    return f"${amount:,.2f}"
