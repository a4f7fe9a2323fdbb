"""
Text utilities for imported cell values and column lookups.
"""

import re
from typing import Optional


def trimmed_or_none(text: Optional[str]) -> Optional[str]:
    """
    Trim whitespace, returning None for empty results.

    Keeps "field omitted" (None) apart from real values when diffing.

    Args:
        text: Raw value

    Returns:
        Trimmed string or None
    """
    if text is None:
        return None

    value = text.strip()
    if not value:
        return None
    return value


def find_column(
    header: list[str],
    name: str,
    case_insensitive: bool = False
) -> Optional[int]:
    """
    Find a column index by name.

    Exact match wins. With case_insensitive=True a casefolded match is
    accepted as fallback (e.g. "retailPrice" for "RetailPrice").

    Returns:
        Column index or None if absent
    """
    if name in header:
        return header.index(name)

    if case_insensitive:
        wanted = name.casefold()
        for index, column in enumerate(header):
            if column.strip().casefold() == wanted:
                return index

    return None


def sanitize_filename(name: str, default: str = "Inventory") -> str:
    """
    Make a user-provided name safe for use as a file name.

    - "2025/12/03 Fornitore" → "2025-12-03 Fornitore"
    - "  " → "Inventory"
    """
    cleaned = re.sub(r"[/:]", "-", name or "").strip()
    return cleaned or default
