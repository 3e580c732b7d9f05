"""Calendar display preferences."""

from enum import Enum

from pydantic import BaseModel


class ViewMode(str, Enum):
    """Calendar view modes."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    AGENDA = "agenda"


class BadgeVariant(str, Enum):
    """How event badges are rendered."""

    DOT = "dot"
    COLORED = "colored"


class AgendaGroupBy(str, Enum):
    """Grouping used by the agenda view."""

    DATE = "date"
    COLOR = "color"


class CalendarSettings(BaseModel):
    """Persisted display preferences."""

    badge_variant: BadgeVariant = BadgeVariant.COLORED
    view: ViewMode = ViewMode.DAY
    use_24_hour_format: bool = True
    agenda_mode_group_by: AgendaGroupBy = AgendaGroupBy.DATE

    model_config = {"frozen": True, "extra": "ignore"}
