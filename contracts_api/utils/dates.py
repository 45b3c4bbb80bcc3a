"""Business-calendar date helpers."""

from datetime import date, datetime, timezone
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo
import logging
import re

from contracts_api.config import settings

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def business_today() -> date:
    """Today's date in the business timezone (contract dates, identifiers)."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).date()


def to_business_date(moment: datetime) -> date:
    return moment.astimezone(ZoneInfo(settings.BUSINESS_TIMEZONE)).date()


def parse_date(value: Any) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string (or date) and return None when invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def split_measurement_datetime(value: str, default_time: Optional[str] = None) -> Tuple[date, str]:
    """Split "YYYY-MM-DD[THH:MM]" into a date and an "HH:MM" time.

    A missing or blank time defaults to ``DEFAULT_MEASUREMENT_TIME``.
    Raises ValueError when the date part is not a valid date.
    """
    default_time = default_time or settings.DEFAULT_MEASUREMENT_TIME
    text = (value or "").strip()
    date_part, _, time_part = text.partition("T")
    if not date_part:
        raise ValueError(f"measurement date {value!r} has no date part")
    day = date.fromisoformat(date_part)

    match = TIME_PATTERN.match(time_part.strip())
    if match:
        time_value = match.group(0)
    else:
        if time_part.strip():
            logger.warning(f"Unrecognized measurement time {time_part!r}, using {default_time}")
        time_value = default_time
    return day, time_value
