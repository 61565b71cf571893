# src/exposure_export/db/time.py
"""Time utilities for database models and export windows."""

from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def epoch_seconds(value: datetime) -> int:
    """Return whole seconds since the epoch, floored."""
    return (as_utc(value) - EPOCH) // timedelta(seconds=1)


def epoch_millis(value: datetime) -> int:
    """Return whole milliseconds since the epoch, floored."""
    return (as_utc(value) - EPOCH) // timedelta(milliseconds=1)
