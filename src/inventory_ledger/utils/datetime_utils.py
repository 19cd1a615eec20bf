"""Datetime utilities for timezone-aware UTC timestamps and ISO dates.

Usage:
    from inventory_ledger.utils.datetime_utils import utc_now

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)
"""

from datetime import date, datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def parse_iso_date(value: Optional[Union[str, date]]) -> Optional[date]:
    """
    Parse an ISO-8601 date string (YYYY-MM-DD).

    Args:
        value: Date string, date/datetime object, or None

    Returns:
        date object, or None if value is None or blank

    Raises:
        ValueError: If the string is not a valid ISO-8601 date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    # Accept full timestamps by keeping only the date part
    return date.fromisoformat(text[:10])
