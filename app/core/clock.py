"""
Clock

Wall-clock helpers. All timestamps in the service are timezone-aware UTC.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes read back from the database.

    SQLite drops tzinfo on round-trip while PostgreSQL keeps it.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
