"""Formatting utilities for report amounts and file names."""

from __future__ import annotations

import re
from typing import Optional, Union

_WORD = re.compile(r"[^\W_]+")

Number = Union[float, int]


def format_currency(amount: Number, currency: str = "RWF", include_code: bool = True) -> str:
    """Format a currency amount with thousands separators.

    Args:
        amount: The amount to format
        currency: Currency code appended to the amount
        include_code: Whether to include the currency code

    Returns:
        Formatted currency string (e.g., "1,234.56 RWF" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        '1,234.56 RWF'
        >>> format_currency(-500, include_code=False)
        '-500.00'
    """
    formatted = f"{amount:,.2f}"
    return f"{formatted} {currency}" if include_code else formatted


def format_amount(value: Optional[Number], blank: str = "") -> str:
    """Format a report cell; absent values render as ``blank``, not ``0``."""
    if value is None:
        return blank
    return f"{value:,.2f}"


def safe_filename(*parts: str, default: str = 'report') -> str:
    """Build a file stem from report fields.

    Each part is reduced to its letters and digits joined by underscores,
    and the parts are joined by hyphens so field boundaries survive.

    Example:
        >>> safe_filename("KIGEME Hospital", "HIV NSP", "APRIL - JUNE / 2024")
        'KIGEME_Hospital-HIV_NSP-APRIL_JUNE_2024'
        >>> safe_filename("", default="budget")
        'budget'
    """
    stems = ['_'.join(_WORD.findall(part or '')) for part in parts]
    return '-'.join(stems) if any(stems) else default
