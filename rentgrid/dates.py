"""
UTC date kernel.

Every comparison in the engine happens on UTC calendar dates. Inputs may be
dates, datetimes (aware or naive) or ISO-8601 strings; naive values are read as
UTC and the host timezone is never consulted.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional, Union

DateInput = Union[date, datetime, str]


class InvalidDateError(ValueError):
    """Raised when a value cannot be read as a calendar date."""

    def __init__(self, value: object, reason: str = "") -> None:
        self.value = value
        message = f"Invalid date: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


def _parse_iso(s: str) -> datetime:
    raw = s.strip()
    if not raw:
        raise InvalidDateError(s, "empty string")
    try:
        if len(raw) == 10:
            return datetime.combine(date.fromisoformat(raw), time.min, tzinfo=timezone.utc)
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidDateError(s, str(e)) from e


def to_utc_instant(value: DateInput) -> datetime:
    """Return an aware UTC datetime; plain dates become midnight UTC."""
    if isinstance(value, str):
        value = _parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise InvalidDateError(value, f"unsupported type {type(value).__name__}")


def to_calendar_date(value: DateInput) -> date:
    """Floor any supported input to its UTC calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_utc_instant(value).date()


def start_of_day(value: DateInput) -> datetime:
    return datetime.combine(to_calendar_date(value), time.min, tzinfo=timezone.utc)


def end_of_day(value: DateInput) -> datetime:
    return datetime.combine(to_calendar_date(value), time.max, tzinfo=timezone.utc)


def day_key(value: DateInput) -> str:
    """YYYY-MM-DD key in UTC."""
    return to_calendar_date(value).isoformat()


def month_key(value: DateInput) -> str:
    """YYYY-MM key in UTC."""
    d = to_calendar_date(value)
    return f"{d.year:04d}-{d.month:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_of_month(value: DateInput) -> datetime:
    d = to_calendar_date(value)
    return datetime(d.year, d.month, 1, tzinfo=timezone.utc)


def end_of_month(value: DateInput) -> datetime:
    """Last microsecond of the last calendar day of the month, UTC."""
    d = to_calendar_date(value)
    last = date(d.year, d.month, days_in_month(d.year, d.month))
    return datetime.combine(last, time.max, tzinfo=timezone.utc)


def add_days(value: DateInput, n: int) -> date:
    return to_calendar_date(value) + timedelta(days=n)


def days_between(left: DateInput, right: DateInput) -> int:
    """Calendar days from right to left (positive when left is later)."""
    return (to_calendar_date(left) - to_calendar_date(right)).days


def is_within_interval(value: DateInput, start: DateInput, end: DateInput) -> bool:
    """Inclusive on both ends, compared as UTC instants."""
    return to_utc_instant(start) <= to_utc_instant(value) <= to_utc_instant(end)


def first_weekday_on_or_after(value: DateInput, weekday: int) -> date:
    """First date on/after value whose weekday() equals weekday (Monday=0)."""
    d = to_calendar_date(value)
    return d + timedelta(days=(weekday - d.weekday()) % 7)


def closest_to(target: DateInput, candidates: Iterable[DateInput]) -> Optional[date]:
    """
    Candidate with the smallest absolute day distance to target.

    Exact ties go to the earlier date, whatever order the candidates arrive in.
    Returns None when there are no candidates.
    """
    t = to_calendar_date(target)
    best: Optional[date] = None
    best_distance = 0
    for c in candidates:
        d = to_calendar_date(c)
        distance = abs((d - t).days)
        if best is None or distance < best_distance or (distance == best_distance and d < best):
            best = d
            best_distance = distance
    return best
