"""Validation of user input into calendar events."""

from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..utils.date_utils import add_minutes
from ..utils.exceptions import EventValidationError
from .event import DEFAULT_COLOR, CalendarEvent, EventColor, EventType, EventUser, new_event_id

# New events get a half-hour slot by default
DEFAULT_DURATION_MINUTES = 30


class EventFormData(BaseModel):
    """Values submitted from the add/edit event form."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    color: EventColor = DEFAULT_COLOR
    location: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _end_after_start(self) -> "EventFormData":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


def default_form_window(
    start_date: Optional[Union[date, datetime]] = None,
    start_time: Optional[tuple[int, int]] = None,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """
    Initial start/end shown when the form opens for a new event.

    Args:
        start_date: Day (or instant) the user clicked, None for "now"
        start_time: Optional (hour, minute) of the clicked slot
        now: Current time, injectable for tests

    Returns:
        Tuple of (start, end), end being 30 minutes after start
    """
    if start_date is None:
        start = now or datetime.now()
        return start, add_minutes(start, DEFAULT_DURATION_MINUTES)

    if not isinstance(start_date, datetime):
        start_date = datetime.combine(start_date, datetime.min.time())

    start = start_date
    if start_time is not None:
        hour, minute = start_time
        start = start_date.replace(hour=hour, minute=minute, second=0, microsecond=0)
    return start, add_minutes(start, DEFAULT_DURATION_MINUTES)


def build_event(
    values: Union[EventFormData, dict[str, Any]],
    existing: Optional[CalendarEvent] = None,
    owner: Optional[EventUser] = None,
) -> CalendarEvent:
    """
    Turn submitted form values into an event.

    When ``existing`` is given the event keeps its id, owner, type, location
    and group; otherwise a new id is generated and ``owner`` is attached.

    Raises:
        EventValidationError: If the values do not pass form validation
    """
    try:
        form = values if isinstance(values, EventFormData) else EventFormData.model_validate(values)
    except ValidationError as e:
        raise EventValidationError(f"Invalid event: {e}") from e

    if existing is not None:
        return existing.model_copy(
            update={
                "title": form.title,
                "description": form.description,
                "start": form.start_date,
                "end": form.end_date,
                "color": form.color,
                "location": form.location if form.location is not None else existing.location,
            }
        )

    return CalendarEvent(
        id=new_event_id(),
        title=form.title,
        description=form.description,
        start=form.start_date,
        end=form.end_date,
        color=form.color,
        type=EventType.TRAINING,
        location=form.location,
        user=owner,
    )
