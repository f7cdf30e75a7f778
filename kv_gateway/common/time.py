"""
Time Utilities

Backend policy:
- Store/query in database as UTC (naive) timestamps.
- Report expirations to callers as Unix epoch seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

UTC = timezone.utc


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def utc_now_naive() -> datetime:
    """Return current UTC time without tzinfo, for database columns."""
    return utc_now().replace(tzinfo=None)


def expires_at_from_ttl(
    ttl_seconds: Optional[int], now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Compute the naive UTC expiration instant for a TTL.

    Returns `None` when no positive TTL is given. TTLs reaching past the
    largest representable datetime are capped at `datetime.max`.
    """
    if ttl_seconds is None or ttl_seconds <= 0:
        return None
    base = now if now is not None else utc_now_naive()
    try:
        return base + timedelta(seconds=ttl_seconds)
    except OverflowError:
        return datetime.max


def to_epoch_seconds(dt: Optional[datetime]) -> Optional[int]:
    """
    Convert a datetime to integer Unix seconds.

    Naive datetimes are treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp())
