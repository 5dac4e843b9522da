"""Human-readable rendering of stored timestamps."""
from __future__ import annotations

from datetime import UTC, datetime

from social_backend.db.time import as_utc, utcnow

SECONDS_PER_MINUTE = 60
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24


def to_relative_time(value: datetime | None, now: datetime | None = None) -> str | None:
    """Return an age string such as ``"just now"``, ``"5m ago"`` or ``"2d ago"``.

    Args:
        value: Absolute timestamp; naive values are treated as UTC.
        now: Reference instant, defaults to the current UTC time.

    Returns:
        The relative string, or None when ``value`` is None.
    """
    if value is None:
        return None

    reference = as_utc(now) if now is not None else utcnow()
    elapsed = (reference - as_utc(value)).total_seconds()

    minutes = int(elapsed // SECONDS_PER_MINUTE)
    if minutes < 1:
        return "just now"
    if minutes < MINUTES_PER_HOUR:
        return f"{minutes}m ago"

    hours = minutes // MINUTES_PER_HOUR
    if hours < HOURS_PER_DAY:
        return f"{hours}h ago"

    return f"{hours // HOURS_PER_DAY}d ago"


def to_iso(value: datetime) -> str:
    """Render ``value`` as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return as_utc(value).astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
