"""
Unit tests for event form validation
"""

from datetime import date, datetime

import pytest

from club_calendar.models.event import CalendarEvent, EventColor, EventType, EventUser
from club_calendar.models.forms import EventFormData, build_event, default_form_window
from club_calendar.utils.exceptions import EventValidationError

VALUES = {
    "title": "Goalkeeper training",
    "description": "Shot stopping drills",
    "start_date": datetime(2024, 4, 2, 17, 0),
    "end_date": datetime(2024, 4, 2, 18, 30),
    "color": "green",
}


class TestBuildEvent:
    """Tests for build_event"""

    def test_new_event(self):
        owner = EventUser(id="coach-1", name="Coach")
        event = build_event(VALUES, owner=owner)
        assert event.title == "Goalkeeper training"
        assert event.color == EventColor.GREEN
        assert event.type == EventType.TRAINING
        assert event.user == owner
        assert event.id

    def test_new_events_get_distinct_ids(self):
        assert build_event(VALUES).id != build_event(VALUES).id

    def test_edit_preserves_identity_and_owner(self, make_event):
        existing = make_event("a", user_id="u1").model_copy(
            update={"type": EventType.MATCH, "location": "Main pitch"}
        )
        edited = build_event({**VALUES, "title": "Renamed"}, existing=existing)
        assert edited.id == "a"
        assert edited.user == existing.user
        assert edited.type == EventType.MATCH
        assert edited.location == "Main pitch"
        assert edited.title == "Renamed"
        assert edited.start == VALUES["start_date"]

    def test_accepts_form_model(self):
        event = build_event(EventFormData(**VALUES))
        assert isinstance(event, CalendarEvent)

    @pytest.mark.parametrize(
        "override",
        [
            {"title": ""},
            {"title": "   "},
            {"description": ""},
            {"color": "pink"},
            {"end_date": datetime(2024, 4, 2, 17, 0)},
            {"end_date": datetime(2024, 4, 2, 16, 0)},
        ],
    )
    def test_invalid_input_rejected(self, override):
        with pytest.raises(EventValidationError):
            build_event({**VALUES, **override})

    def test_strips_whitespace(self):
        event = build_event({**VALUES, "title": "  Sprint  "})
        assert event.title == "Sprint"


class TestDefaultFormWindow:
    """Tests for default_form_window"""

    def test_now_plus_thirty_minutes(self):
        now = datetime(2024, 4, 2, 10, 7)
        assert default_form_window(now=now) == (now, datetime(2024, 4, 2, 10, 37))

    def test_clicked_slot(self):
        start, end = default_form_window(date(2024, 4, 2), (17, 30))
        assert start == datetime(2024, 4, 2, 17, 30)
        assert end == datetime(2024, 4, 2, 18, 0)

    def test_clicked_day_without_time(self):
        start, end = default_form_window(datetime(2024, 4, 2, 9, 15))
        assert start == datetime(2024, 4, 2, 9, 15)
        assert end == datetime(2024, 4, 2, 9, 45)


class TestEventModel:
    """Tests for the event model boundary"""

    def test_unknown_color_rejected(self):
        with pytest.raises(ValueError):
            CalendarEvent(
                title="x", start=datetime(2024, 1, 1), end=datetime(2024, 1, 1, 1), color="pink"
            )

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            CalendarEvent(
                title="x", start=datetime(2024, 1, 1), end=datetime(2024, 1, 1, 1), type="party"
            )

    def test_start_after_end_not_enforced_by_model(self):
        event = CalendarEvent(title="x", start=datetime(2024, 1, 2), end=datetime(2024, 1, 1))
        assert event.start > event.end

    def test_to_local_time(self):
        event = CalendarEvent(title="x", start=datetime(2024, 1, 1, 12), end=datetime(2024, 1, 1, 13))
        local = event.to_local_time("Africa/Algiers")
        assert local.start.hour == 13
        assert local.id == event.id
