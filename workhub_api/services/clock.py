# workhub_api/services/clock.py
"""Local-time helpers; every stored check-in/out is a naive datetime in APP_TIMEZONE."""
from __future__ import annotations

from datetime import datetime, date, time, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def local_tz() -> ZoneInfo:
    return ZoneInfo(current_app.config.get("APP_TIMEZONE") or "Asia/Kolkata")


def now_local() -> datetime:
    return datetime.now(timezone.utc).astimezone(local_tz()).replace(tzinfo=None)


def today_local() -> date:
    return now_local().date()


def to_local_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(local_tz()).replace(tzinfo=None)


def parse_datetime(s) -> datetime | None:
    """ISO-8601 (a trailing 'Z' is accepted) → naive local datetime."""
    if not s:
        return None
    if isinstance(s, datetime):
        return to_local_naive(s)
    raw = str(s).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return to_local_naive(datetime.fromisoformat(raw))
    except ValueError:
        return None


def parse_date(s) -> date | None:
    if not s:
        return None
    if isinstance(s, date):
        return s
    for fmt in ("%Y-%m-%d", "%d-%m-%Y"):
        try:
            return datetime.strptime(str(s).strip(), fmt).date()
        except ValueError:
            pass
    return None


def parse_time(s) -> time | None:
    if not s:
        return None
    if isinstance(s, time):
        return s
    raw = str(s).strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            pass
    # full timestamps are accepted too; only the local wall-clock part is kept
    dt = parse_datetime(raw)
    return dt.time().replace(microsecond=0) if dt else None


def late_after() -> time:
    return parse_time(current_app.config.get("LATE_AFTER") or "09:00") or time(9, 0)


def hours_between(start: datetime, end: datetime) -> float:
    return round((end - start).total_seconds() / 3600.0, 2)


def time_span_hours(start: time, end: time) -> float:
    """Hours from start to end on a clock face; an end before the start rolls past midnight."""
    s = start.hour * 3600 + start.minute * 60 + start.second
    e = end.hour * 3600 + end.minute * 60 + end.second
    if e < s:
        e += 24 * 3600
    return round((e - s) / 3600.0, 2)


def server_time_payload() -> dict:
    utc_now = datetime.now(timezone.utc)
    local = utc_now.astimezone(local_tz())
    return {
        "utc": utc_now.isoformat().replace("+00:00", "Z"),
        "timestamp": int(utc_now.timestamp() * 1000),
        "timezone": str(local_tz()),
        "local": local.isoformat(),
        "localDate": local.date().isoformat(),
        "localTime": local.strftime("%H:%M:%S"),
    }
