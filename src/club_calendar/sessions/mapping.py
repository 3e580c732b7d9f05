"""Conversion between training sessions and calendar events."""

from datetime import datetime, timedelta
from typing import Any

from ..models.event import CalendarEvent, EventColor, EventType, EventUser
from ..models.session import Organization, TrainingSession

SESSION_TITLE = "Training session"
DEFAULT_SESSION_DURATION = timedelta(hours=1)


def _parse_hhmm(value: str) -> tuple[int, int]:
    hour, minute = value.split(":")
    hour, minute = int(hour), int(minute)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time: {value!r}")
    return hour, minute


def session_end(session: TrainingSession) -> datetime:
    """
    End instant of a session.

    Uses ``end_time`` on the session's day; falls back to one hour after the
    start when ``end_time`` is missing, malformed or not after the start.
    """
    try:
        hour, minute = _parse_hhmm(session.end_time)
    except (AttributeError, ValueError):
        return session.date + DEFAULT_SESSION_DURATION

    end = session.date.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if end <= session.date:
        return session.date + DEFAULT_SESSION_DURATION
    return end


def organization_user(organization: Organization) -> EventUser:
    """Sessions are owned by the club itself."""
    return EventUser(
        id=organization.id,
        name=organization.name,
        picture_path=organization.logo or None,
    )


def session_to_event(session: TrainingSession, organization: Organization) -> CalendarEvent:
    return CalendarEvent(
        id=session.id,
        title=SESSION_TITLE,
        description=session.description or "",
        location=session.location,
        start=session.date,
        end=session_end(session),
        color=EventColor.BLUE,
        type=EventType.TRAINING,
        user=organization_user(organization),
    )


def event_to_session_data(event: CalendarEvent, organization_id: str) -> dict[str, Any]:
    """Fields written to the session store for an event."""
    return {
        "organization_id": organization_id,
        "date": event.start,
        "start_time": event.start.strftime("%H:%M"),
        "end_time": event.end.strftime("%H:%M"),
        "description": event.description,
        "location": event.location,
    }
