"""
Calendar period boundaries in the Asia/Jakarta timezone.

Used by the visit analytics to bucket records into the current and previous
week, month and year. Every function takes an optional ``now`` so callers can
pin the clock; by default the current time in Jakarta is used.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

JAKARTA_TZ = ZoneInfo("Asia/Jakarta")
INVALID_DATE = "Invalid date"

# Short month names as rendered by the id-ID locale.
MONTHS_ID_SHORT = (
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
)
MONTHS_ID_LONG = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return is_in_range(value, self.start, self.end)

    def as_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def _as_aware(value: datetime) -> datetime:
    # MongoDB hands back naive datetimes in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=JAKARTA_TZ)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=JAKARTA_TZ)


def current_date(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` (or the wall clock) converted to Jakarta time."""
    if now is None:
        return datetime.now(JAKARTA_TZ)
    return _as_aware(now).astimezone(JAKARTA_TZ)


def current_week_range(now: Optional[datetime] = None) -> DateRange:
    """Monday 00:00:00.000 through Sunday 23:59:59.999 of the current week."""
    today = current_date(now).date()
    # weekday() is 0 for Monday, so Sunday steps back 6 days.
    monday = today - timedelta(days=today.weekday())
    sunday = monday + timedelta(days=6)
    return DateRange(_start_of_day(monday), _end_of_day(sunday))


def current_month_range(now: Optional[datetime] = None) -> DateRange:
    today = current_date(now).date()
    return _month_range(today.year, today.month)


def current_year_range(now: Optional[datetime] = None) -> DateRange:
    today = current_date(now).date()
    return _year_range(today.year)


def previous_week_range(now: Optional[datetime] = None) -> DateRange:
    current = current_week_range(now)
    return DateRange(
        current.start - timedelta(days=7), current.end - timedelta(days=7)
    )


def previous_month_range(now: Optional[datetime] = None) -> DateRange:
    today = current_date(now).date()
    if today.month == 1:
        return _month_range(today.year - 1, 12)
    return _month_range(today.year, today.month - 1)


def previous_year_range(now: Optional[datetime] = None) -> DateRange:
    today = current_date(now).date()
    return _year_range(today.year - 1)


def _month_range(year: int, month: int) -> DateRange:
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(
        _start_of_day(date(year, month, 1)), _end_of_day(date(year, month, last_day))
    )


def _year_range(year: int) -> DateRange:
    return DateRange(_start_of_day(date(year, 1, 1)), _end_of_day(date(year, 12, 31)))


def is_in_range(value: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive on both ends."""
    value = _as_aware(value)
    return _as_aware(start) <= value <= _as_aware(end)


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO date or datetime into an aware datetime.

    Date-only strings are read as UTC midnight, the way browsers
    interpret them. Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        return _as_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return _as_aware(parsed)


def format_date_only(value: Union[str, date, datetime, None]) -> str:
    """
    Render a date as ``"5 Mar 2024"`` in Jakarta time.

    Unparseable input returns the ``"Invalid date"`` sentinel instead of
    raising.
    """
    parsed = parse_datetime(value)
    if parsed is None:
        return INVALID_DATE
    try:
        local = parsed.astimezone(JAKARTA_TZ)
    except (OverflowError, ValueError):
        # Timestamps at the edge of the datetime range cannot shift zones.
        return INVALID_DATE
    return f"{local.day} {MONTHS_ID_SHORT[local.month - 1]} {local.year}"


def format_month_year(value: datetime) -> str:
    local = current_date(value)
    return f"{MONTHS_ID_LONG[local.month - 1]} {local.year}"


PERIOD_RANGES = {
    "week": (current_week_range, previous_week_range),
    "month": (current_month_range, previous_month_range),
    "year": (current_year_range, previous_year_range),
}


def period_ranges(
    period: str, now: Optional[datetime] = None
) -> tuple[DateRange, DateRange]:
    """Return the (current, previous) ranges for ``week``, ``month`` or ``year``."""
    try:
        current_fn, previous_fn = PERIOD_RANGES[period]
    except KeyError:
        raise ValueError(f"Unknown period: {period}") from None
    return current_fn(now), previous_fn(now)


def period_label(period: str, current: DateRange) -> str:
    if period == "week":
        return f"{format_date_only(current.start)} - {format_date_only(current.end)}"
    if period == "month":
        return format_month_year(current.start)
    return str(current.start.year)
