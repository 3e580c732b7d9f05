"""Narrowing the event set by owner and color."""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Union

from ..models.event import CalendarEvent, EventColor

ALL_USERS = "all"


@dataclass(frozen=True)
class FilterState:
    """Transient filter selection; never persisted."""

    selected_user_id: str = ALL_USERS
    selected_colors: tuple[EventColor, ...] = field(default_factory=tuple)

    @property
    def is_active(self) -> bool:
        return self.selected_user_id != ALL_USERS or bool(self.selected_colors)

    def toggle_color(self, color: Union[EventColor, str]) -> "FilterState":
        """Add ``color`` to the selection, or remove it if already selected."""
        color = EventColor(color)
        if color in self.selected_colors:
            colors = tuple(c for c in self.selected_colors if c != color)
        else:
            colors = self.selected_colors + (color,)
        return replace(self, selected_colors=colors)

    def select_user(self, user_id: str) -> "FilterState":
        """Replace the user selection (``"all"`` disables the user filter)."""
        return replace(self, selected_user_id=user_id)

    def clear(self) -> "FilterState":
        return FilterState()


def passes_user_filter(event: CalendarEvent, user_id: str) -> bool:
    if user_id == ALL_USERS:
        return True
    return event.user_id is not None and event.user_id == user_id


def passes_color_filter(event: CalendarEvent, colors: Iterable[EventColor]) -> bool:
    colors = tuple(colors)
    if not colors:
        return True
    return event.effective_color in colors


def passes_filters(event: CalendarEvent, state: FilterState) -> bool:
    """An event is visible when it passes both the user and the color filter."""
    return passes_user_filter(event, state.selected_user_id) and passes_color_filter(
        event, state.selected_colors
    )


def apply_filters(events: Iterable[CalendarEvent], state: FilterState) -> list[CalendarEvent]:
    """Visible subset of ``events`` under ``state``, keeping the original order."""
    return [e for e in events if passes_filters(e, state)]
