"""Calendar event data model."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

import pytz
from pydantic import BaseModel, Field


class EventColor(str, Enum):
    """Color tags available in the calendar palette."""

    BLUE = "blue"
    GREEN = "green"
    RED = "red"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    GRAY = "gray"


# Events without an explicit color are shown and filtered as blue
DEFAULT_COLOR = EventColor.BLUE


class EventType(str, Enum):
    """Kind of occurrence."""

    TRAINING = "training"
    MATCH = "match"
    EVENT = "event"
    MEETING = "meeting"


class EventUser(BaseModel):
    """User an event belongs to (display and filtering only)."""

    id: str
    name: str
    picture_path: Optional[str] = None

    model_config = {"frozen": True}


def new_event_id() -> str:
    """Client-generated identifier for events that have not been persisted yet."""
    return uuid.uuid4().hex


class CalendarEvent(BaseModel):
    """Schedulable occurrence shown on the calendar."""

    # Identifiers
    id: str = Field(default_factory=new_event_id)

    # Basic properties
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    group: Optional[str] = None

    # Time properties
    start: datetime
    end: datetime
    all_day: bool = False

    # Classification
    color: Optional[EventColor] = DEFAULT_COLOR
    type: EventType = EventType.TRAINING

    # Ownership
    user: Optional[EventUser] = None

    model_config = {
        "json_encoders": {
            datetime: lambda v: v.isoformat(),
        },
    }

    @property
    def effective_color(self) -> EventColor:
        """Color used for display and filtering."""
        return self.color or DEFAULT_COLOR

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    @property
    def is_multi_day(self) -> bool:
        return self.start.date() != self.end.date()

    def to_local_time(self, target_tz: str = "UTC") -> "CalendarEvent":
        """
        Convert event times to target timezone.

        Args:
            target_tz: Target timezone name

        Returns:
            New CalendarEvent with converted times
        """
        tz = pytz.timezone(target_tz)
        event_copy = self.model_copy(deep=True)

        if self.start.tzinfo is None:
            event_copy.start = pytz.utc.localize(self.start).astimezone(tz)
        else:
            event_copy.start = self.start.astimezone(tz)

        if self.end.tzinfo is None:
            event_copy.end = pytz.utc.localize(self.end).astimezone(tz)
        else:
            event_copy.end = self.end.astimezone(tz)

        return event_copy
