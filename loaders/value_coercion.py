"""
Numeric coercion for free-form spreadsheet cells.

Quantities, rates and amounts arrive as numbers, as text like "₹ 1,250.00", or as
junk. Coercion keeps "no value" (None) apart from a literal zero; only summation
points collapse None to 0.

Functions:
    coerce_number: Cell value -> finite float or None
    as_quantity: Coerced value -> float, absent counted as 0
"""

import math
import numbers
import re

from .config import CURRENCY_SYMBOLS


LEADING_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)")


def coerce_number(value):
    """
    Convert a raw cell value into a finite number, or None when there is none.

    Numbers pass through unchanged. Text loses currency symbols, thousands
    separators and whitespace before being parsed as a decimal; text that is not
    a plain decimal yields its leading number ("10 bags" -> 10.0).

    Args:
        value: Raw cell value (str, int, float, None)

    Returns:
        int | float | None

    Examples:
        >>> coerce_number("₹ 1,250.50")
        1250.5
        >>> coerce_number("25 Nos")
        25.0
        >>> coerce_number(0)
        0
        >>> coerce_number("n/a") is None
        True
        >>> coerce_number("") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        return value if math.isfinite(value) else None

    text = str(value)
    for symbol in CURRENCY_SYMBOLS:
        text = text.replace(symbol, "")
    text = "".join(text.replace(",", "").split())
    if not text:
        return None

    try:
        number = float(text)
    except ValueError:
        match = LEADING_NUMBER_RE.match(text)
        if not match:
            return None
        number = float(match.group())

    return number if math.isfinite(number) else None


def as_quantity(value):
    """Coerce for summation: absent values count as 0."""
    number = coerce_number(value)
    return 0 if number is None else number
