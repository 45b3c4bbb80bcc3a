"""
Date-scoped identifier generation.

Identifiers look like ``{prefix}{YYYYMMDD}-{seq}`` with the sequence padded
to three digits (``C20250101-001``). The lowest unused sequence for the day
wins; sequences past 999 keep counting (``C20250101-1000``).
"""

from datetime import date
from typing import Iterable

from contracts_api.config import settings

SEQUENCE_WIDTH = 3


def identifier_base(prefix: str, on_date: date) -> str:
    return f"{prefix}{on_date.strftime('%Y%m%d')}-"


def generate_identifier(prefix: str, on_date: date, existing: Iterable[str]) -> str:
    """Return the first identifier for ``on_date`` not present in ``existing``."""
    if not prefix:
        raise ValueError("identifier prefix must not be empty")

    taken = set(existing)
    base = identifier_base(prefix, on_date)
    seq = 1
    while f"{base}{seq:0{SEQUENCE_WIDTH}d}" in taken:
        seq += 1
    return f"{base}{seq:0{SEQUENCE_WIDTH}d}"


def is_final_estimate(estimate_no: str | None, marker: str | None = None) -> bool:
    """True when ``estimate_no`` carries the final-variant marker."""
    marker = marker or settings.FINAL_ESTIMATE_MARKER
    return bool(estimate_no) and marker in estimate_no


def origin_estimate_no(estimate_no: str, marker: str | None = None) -> str:
    """Estimate number with the final-variant marker and anything after it removed."""
    marker = marker or settings.FINAL_ESTIMATE_MARKER
    index = estimate_no.find(marker)
    if index < 0:
        return estimate_no
    return estimate_no[:index]
