"""Time utilities (epoch milliseconds and per-user local days)."""

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

MS_PER_HOUR = 60 * 60 * 1000
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def resolve_timezone(name: Optional[str], fallback: str = "UTC") -> tzinfo:
    """
    Look up an IANA timezone, falling back when the name is empty or unknown.
    """
    for candidate in (name, fallback):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            continue
    return timezone.utc


def to_epoch_ms(dt: datetime) -> int:
    """Aware datetime to integer milliseconds since epoch."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // timedelta(milliseconds=1)


def end_of_day_ms(now: datetime, tz: tzinfo) -> int:
    """23:59:59.999 of ``now``'s calendar day in ``tz``, as epoch ms."""
    local_day = now.astimezone(tz).date()
    end = datetime.combine(local_day, time(23, 59, 59, 999000), tzinfo=tz)
    return to_epoch_ms(end)


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """Midnight of ``day`` in ``tz``."""
    return datetime.combine(day, time.min, tzinfo=tz)


def days_until(as_of: datetime, target: datetime) -> int:
    """Whole days from ``as_of`` to ``target``, rounded up (may be negative)."""
    return math.ceil((target - as_of).total_seconds() / SECONDS_PER_DAY)


def hours_remaining(expires_at_ms: int, now_ms: int) -> int:
    """Hours left before expiry, rounded up."""
    return math.ceil((expires_at_ms - now_ms) / MS_PER_HOUR)


def trailing_window_start(as_of: datetime, days: int) -> date:
    """First calendar day of a trailing window ending at ``as_of``."""
    return as_of.date() - timedelta(days=days)
