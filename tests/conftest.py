"""
Pytest configuration and fixtures for club calendar tests
"""

from datetime import datetime

import pytest

from club_calendar.models.event import CalendarEvent, EventColor, EventUser
from club_calendar.settings.store import InMemorySettingsStorage


@pytest.fixture
def users():
    """Two coaches owning events"""
    return [
        EventUser(id="u1", name="Coach One"),
        EventUser(id="u2", name="Coach Two", picture_path="/img/u2.png"),
    ]


@pytest.fixture
def make_event(users):
    """Factory for events with sensible defaults"""

    def _make(
        event_id,
        user_id=None,
        color=EventColor.BLUE,
        start=datetime(2024, 3, 4, 18, 0),
        end=datetime(2024, 3, 4, 19, 30),
        title=None,
    ):
        owner = next((u for u in users if u.id == user_id), None)
        return CalendarEvent(
            id=event_id,
            title=title or f"Session {event_id}",
            start=start,
            end=end,
            color=color,
            user=owner,
        )

    return _make


@pytest.fixture
def scenario_events(make_event):
    """Event "a" owned by u1 in blue, event "b" owned by u2 in red"""
    return [
        make_event("a", user_id="u1", color=EventColor.BLUE),
        make_event("b", user_id="u2", color=EventColor.RED),
    ]


@pytest.fixture
def storage():
    return InMemorySettingsStorage()
