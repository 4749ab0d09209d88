from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    # Resolve wall-clock time once per operation and pass it down explicitly.
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite round-trips drop tzinfo; treat naive timestamps as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
