"""
Amount parsing and display helpers.

Input amounts arrive as numbers or as display strings with thousands
separators ("1,000,000"). Malformed input is never stored: parsing either
falls back to the previous valid value (workflow input) or to 0 (contract
edits).
"""

import logging
import math
from typing import Any, Optional

logger = logging.getLogger(__name__)


def to_number(value: Any) -> Optional[float]:
    """Return a finite float for ``value`` or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.replace(",", "").strip()
        if text == "":
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_amount(value: Any, previous: float, field: str = "amount") -> float:
    """Parse a non-negative amount, retaining ``previous`` when invalid.

    ``None`` means "not supplied" and keeps the previous value; an empty
    string means a cleared input and yields 0.
    """
    if value is None:
        return previous
    number = to_number(value)
    if number is None or number < 0:
        logger.warning("Rejected %s input %r, keeping %s", field, value, previous)
        return previous
    return number


def coerce_amount(value: Any, field: str = "amount") -> float:
    """Coerce any input to a float, defaulting to 0 for malformed values."""
    if value is None:
        return 0.0
    number = to_number(value)
    if number is None:
        logger.warning("Malformed %s input %r coerced to 0", field, value)
        return 0.0
    return number


def format_number(value: Any) -> str:
    """Format a number with thousands separators (at most 3 decimals)."""
    number = to_number(value)
    if number is None:
        return str(value)
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def format_won(value: Any) -> str:
    """Format an amount as Korean won ("1,000,000원")."""
    return f"{format_number(value or 0)}원"
