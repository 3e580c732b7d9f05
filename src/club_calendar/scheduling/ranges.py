"""Visible date windows for the calendar views."""

import logging
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Optional, Union

from ..models.event import CalendarEvent
from ..models.settings import ViewMode
from ..utils.date_utils import (
    DateLike,
    days_between,
    end_of_day,
    iso_week_number,
    iso_week_year,
    last_day_of_month,
    localize_like,
    overlaps,
    start_of_day,
    start_of_iso_week,
    weeks_in_iso_year,
)

logger = logging.getLogger(__name__)

DateRange = tuple[datetime, datetime]

_WEEK_TOKEN = re.compile(r"^(\d{4})-W(\d{1,2})$")
_MONTH_TOKEN = re.compile(r"^(\d{4})-(\d{1,2})$")
_DAY_TOKEN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_day_token(token: str) -> date:
    """Parse ``YYYY-MM-DD``."""
    if not _DAY_TOKEN.match(token):
        raise ValueError(f"Invalid day token: {token!r}")
    return date.fromisoformat(token)


def parse_week_token(token: str) -> tuple[int, int]:
    """Parse ``YYYY-Www`` into (ISO year, ISO week), validating the week exists."""
    match = _WEEK_TOKEN.match(token)
    if not match:
        raise ValueError(f"Invalid week token: {token!r}")
    year, week = int(match.group(1)), int(match.group(2))
    if not 1 <= week <= weeks_in_iso_year(year):
        raise ValueError(f"Week {week} does not exist in {year}: {token!r}")
    return year, week


def parse_month_token(token: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into (year, month)."""
    match = _MONTH_TOKEN.match(token)
    if not match:
        raise ValueError(f"Invalid month token: {token!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month token: {token!r}")
    return year, month


def day_range(reference: DateLike) -> DateRange:
    return start_of_day(reference), end_of_day(reference)


def week_range_for(year: int, week: int, tz_reference: Optional[DateLike] = None) -> DateRange:
    """Monday 00:00 to Sunday 23:59:59.999 of an ISO week."""
    monday = start_of_iso_week(year, week)
    sunday = monday + timedelta(days=6)
    start = localize_like(datetime.combine(monday, datetime.min.time()), tz_reference)
    last = localize_like(datetime.combine(sunday, datetime.min.time()), tz_reference)
    return start, end_of_day(last)


def week_range(reference: DateLike) -> DateRange:
    return week_range_for(iso_week_year(reference), iso_week_number(reference), reference)


def month_range_for(year: int, month: int, tz_reference: Optional[DateLike] = None) -> DateRange:
    """First day 00:00 to last day 23:59:59.999 of a month."""
    first = localize_like(datetime(year, month, 1), tz_reference)
    last = localize_like(datetime(year, month, last_day_of_month(year, month)), tz_reference)
    return first, end_of_day(last)


def month_range(reference: DateLike) -> DateRange:
    return month_range_for(reference.year, reference.month, reference)


def _range_for_reference(view: ViewMode, reference: DateLike) -> DateRange:
    if view == ViewMode.DAY:
        return day_range(reference)
    if view == ViewMode.WEEK:
        return week_range(reference)
    # Agenda lists the same window as month
    return month_range(reference)


def _range_for_token(view: ViewMode, token: str, tz_reference: DateLike) -> DateRange:
    if view == ViewMode.DAY:
        day = parse_day_token(token)
        naive = datetime.combine(day, datetime.min.time())
        return day_range(localize_like(naive, tz_reference))
    if view == ViewMode.WEEK:
        year, week = parse_week_token(token)
        return week_range_for(year, week, tz_reference)
    year, month = parse_month_token(token)
    return month_range_for(year, month, tz_reference)


def _now_like(reference: Optional[DateLike], now: Optional[datetime]) -> datetime:
    """Current time in the zone of ``reference`` when it is aware."""
    tz = getattr(reference, "tzinfo", None)
    if now is None:
        return datetime.now(tz)
    if tz is None:
        return now
    if now.tzinfo is None:
        return localize_like(now, reference)
    return now.astimezone(tz)


def resolve_range(
    view: Union[ViewMode, str],
    reference: Optional[DateLike] = None,
    period: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """
    Resolve the inclusive [start, end] window a view displays.

    Args:
        view: View mode (day, week, month or agenda)
        reference: Date the view is centered on (defaults to now)
        period: Explicit period token (``YYYY-MM-DD``, ``YYYY-Www`` or
            ``YYYY-MM`` depending on the view), takes precedence over reference
        now: Current time, injectable for tests

    Returns:
        Tuple of (start, end). A malformed period token falls back to the
        period of the same view containing ``now``.
    """
    view = ViewMode(view)
    now = _now_like(reference, now)

    if period is not None:
        try:
            return _range_for_token(view, period, reference or now)
        except (ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Ignoring invalid {view.value} period {period!r}: {e}")
            return _range_for_reference(view, now)

    return _range_for_reference(view, reference if reference is not None else now)


def period_token(view: Union[ViewMode, str], reference: DateLike) -> str:
    """
    Token identifying the period of ``view`` containing ``reference``.

    Used by hosts to keep the visible period in a URL.
    """
    view = ViewMode(view)
    if view == ViewMode.DAY:
        return f"{reference.year:04d}-{reference.month:02d}-{reference.day:02d}"
    if view == ViewMode.WEEK:
        return f"{iso_week_year(reference):04d}-W{iso_week_number(reference):02d}"
    return f"{reference.year:04d}-{reference.month:02d}"


def events_in_range(
    events: Iterable[CalendarEvent],
    start: datetime,
    end: datetime,
) -> list[CalendarEvent]:
    """Events overlapping [start, end], in their original order."""
    return [e for e in events if overlaps(e.start, e.end, start, end)]


def multi_day_events_for_day(
    events: Iterable[CalendarEvent],
    day: DateLike,
) -> list[CalendarEvent]:
    """
    Multi-day events covering any part of ``day``, longest first.

    Args:
        events: Candidate events
        day: Day shown by the day view

    Returns:
        Events sorted by duration in whole days, descending
    """
    day_start, day_end = day_range(day)
    covering = [
        e for e in events if e.is_multi_day and overlaps(e.start, e.end, day_start, day_end)
    ]
    return sorted(covering, key=lambda e: days_between(e.start, e.end), reverse=True)


def event_day_position(event: CalendarEvent, day: DateLike) -> tuple[int, int]:
    """(day N, of M days) of ``day`` within a multi-day event, both 1-based."""
    total = days_between(event.start, event.end) + 1
    current = days_between(event.start, day) + 1
    return current, total
