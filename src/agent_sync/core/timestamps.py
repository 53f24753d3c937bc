"""Timestamp formatting for merge headers and registry display."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Default clock: the current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


def format_utc(dt: datetime) -> str:
    """Format a datetime as "YYYY-MM-DDTHH:MM:SS.mmmZ".

    Naive datetimes are taken to be local time. Millisecond precision keeps
    successive merge headers distinguishable.
    """
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt_utc.microsecond // 1000:03d}Z"


def utc_to_local(utc_ts: str, fmt: str = "%Y-%m-%d %H:%M") -> str:
    """Convert a UTC ISO 8601 timestamp to a local-time string.

    Returns the formatted local time, or the raw input on parse failure.
    """
    try:
        dt_utc = datetime.fromisoformat(utc_ts.replace("Z", "+00:00"))
        return dt_utc.astimezone().strftime(fmt)
    except (ValueError, OverflowError):
        return utc_ts
