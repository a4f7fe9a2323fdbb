"""
Number utilities for spreadsheet values.

Spreadsheet exports come from devices with either "," or "." as decimal
separator. Thousands separators are not supported: "1.234,5" is invalid.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

DEFAULT_EPSILON = Decimal("0.0001")


def normalize_number_string(text: Optional[str]) -> str:
    """
    Replace comma with period and trim whitespace.

    Args:
        text: Raw cell value

    Returns:
        Normalized string (may be empty)
    """
    if text is None:
        return ""
    return text.replace(",", ".").strip()


def parse_decimal(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse a locale-flavored numeric string.

    - "10,5" → Decimal("10.5")
    - " 3 " → Decimal("3")
    - "" / "abc" / "NaN" → None

    Args:
        text: Raw cell value

    Returns:
        Decimal, or None if empty or not a finite decimal literal
    """
    normalized = normalize_number_string(text)
    if not normalized:
        return None

    try:
        value = Decimal(normalized)
    except InvalidOperation:
        return None

    if not value.is_finite():
        return None
    return value


def decimals_equal(
    a: Optional[Decimal],
    b: Optional[Decimal],
    epsilon: Decimal = DEFAULT_EPSILON
) -> bool:
    """
    Compare two optional decimals with a tolerance.

    Both absent is equal, one absent is unequal, otherwise equal
    when the absolute difference is below epsilon.
    """
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return abs(a - b) < epsilon


def format_quantity(value: Decimal) -> str:
    """
    Render a counted quantity for a grid cell.

    Integral values drop the fraction ("3"), others keep two decimals ("2.50").
    """
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value:.2f}"


def to_decimal(value) -> Optional[Decimal]:
    """Convert a database numeric (int/float/str/None) to Decimal."""
    if value is None:
        return None
    return Decimal(str(value))
