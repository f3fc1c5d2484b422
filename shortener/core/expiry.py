"""
Expiry and timestamp helpers.

All timestamps in the service are timezone-aware UTC datetimes. Expiry is only
ever evaluated at read time; nothing sweeps expired records.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def compute_expiry(created_at: datetime, validity_minutes: int) -> datetime:
    """Return the instant a record created at ``created_at`` stops redirecting."""
    return created_at + timedelta(minutes=validity_minutes)


def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """
    Check whether an expiry instant has passed.

    A record is still live at exactly ``expires_at``; it is expired only once
    the current time is strictly after it.

    Args:
        expires_at: Expiry instant of the record
        now: Evaluation time (defaults to the current UTC time)

    Returns:
        True if expired, False otherwise
    """
    if now is None:
        now = utc_now()
    return now > expires_at


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime as ISO-8601 UTC with millisecond precision.

    Example:
        2025-01-01T10:30:00.000Z
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
