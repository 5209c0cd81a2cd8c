# utils/clock.py
from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as dtparse


def now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def now_iso() -> str:
    return now_utc().isoformat()


def local_tz(name: str | None) -> dt.tzinfo:
    if not name or name.upper() == "UTC":
        return dt.timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return dt.timezone.utc


def day_bounds(tz: dt.tzinfo, now: dt.datetime | None = None) -> tuple[dt.datetime, dt.datetime]:
    """Half-open [start, end) of the calendar day containing `now`, in `tz`."""
    now = (now or now_utc()).astimezone(tz)
    start = dt.datetime.combine(now.date(), dt.time.min, tzinfo=tz)
    end = dt.datetime.combine(now.date() + dt.timedelta(days=1), dt.time.min, tzinfo=tz)
    return start, end


def parse_ts(value) -> dt.datetime | None:
    """Parse a datastore timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    else:
        try:
            parsed = dtparse.isoparse(str(value))
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed
