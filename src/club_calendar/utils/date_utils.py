"""Date and time utilities for the club calendar.

All day, week and month boundary arithmetic lives here so that every view
computes its window the same way.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Union

import pytz

# Ranges are inclusive and end at 23:59:59.999
END_OF_DAY = time(23, 59, 59, 999000)

DateLike = Union[date, datetime]


def normalize_timestamp(dt: datetime) -> datetime:
    """Convert aware datetimes to UTC, leave naive wall-clock times untouched."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(pytz.utc)


def localize_like(naive: datetime, reference: DateLike) -> datetime:
    """
    Attach the timezone of ``reference`` to a naive wall-clock datetime.

    pytz zones need ``localize`` to pick the right DST offset, other tzinfo
    implementations can be attached directly.
    """
    tz = getattr(reference, "tzinfo", None)
    if tz is None:
        return naive
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: DateLike) -> datetime:
    """Local midnight of the day containing ``value``."""
    return localize_like(datetime.combine(_as_date(value), time.min), value)


def end_of_day(value: DateLike) -> datetime:
    """23:59:59.999 of the day containing ``value``."""
    return localize_like(datetime.combine(_as_date(value), END_OF_DAY), value)


def iso_week_number(value: DateLike) -> int:
    """ISO-8601 week number (week 1 holds the year's first Thursday)."""
    return _as_date(value).isocalendar()[1]


def iso_week_year(value: DateLike) -> int:
    """ISO-8601 week-numbering year, which differs from the calendar year near New Year."""
    return _as_date(value).isocalendar()[0]


def start_of_iso_week(year: int, week: int) -> date:
    """
    Monday of the given ISO week.

    Args:
        year: ISO week-numbering year
        week: ISO week number (1-52, or 53 for long years)

    Returns:
        Date of that week's Monday

    Raises:
        ValueError: If the week does not exist in that year
    """
    return date.fromisocalendar(year, week, 1)


def weeks_in_iso_year(year: int) -> int:
    """Number of ISO weeks in a year (52 or 53)."""
    # Dec 28 is always in the last ISO week of its year
    return date(year, 12, 28).isocalendar()[1]


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def overlaps(
    start: datetime,
    end: datetime,
    range_start: datetime,
    range_end: datetime,
) -> bool:
    """True when [start, end] and [range_start, range_end] share at least one instant."""
    return start <= range_end and end >= range_start


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole calendar days from ``start`` to ``end``."""
    return (_as_date(end) - _as_date(start)).days


def format_time(value: datetime, use_24_hour_format: bool = True) -> str:
    """
    Render the time of day the way the calendar displays it.

    Args:
        value: Datetime to render
        use_24_hour_format: ``HH:MM`` when True, ``h:MM AM/PM`` otherwise

    Returns:
        Formatted time string
    """
    if use_24_hour_format:
        return value.strftime("%H:%M")
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)
