# src/vita_companion/core/clock.py

"""
Fixed-offset local calendar helpers.

The deployment is single-locale: "today" is derived from a UTC instant shifted by
a configured offset (hours), never from the host timezone.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone


def local_tz(utc_offset_hours: float) -> timezone:
    return timezone(timedelta(hours=float(utc_offset_hours)))


def as_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def local_date(instant: datetime, utc_offset_hours: float) -> date:
    return as_utc(instant).astimezone(local_tz(utc_offset_hours)).date()


def local_today(utc_offset_hours: float, *, now: datetime | None = None) -> date:
    return local_date(now or datetime.now(UTC), utc_offset_hours)


def local_date_of_ts(ts: float, utc_offset_hours: float) -> date:
    return local_date(datetime.fromtimestamp(float(ts), tz=UTC), utc_offset_hours)
