"""
Unit tests for training-session integration

Tests cover:
1. Mapping sessions to events and back
2. TrainingSessionHandler driving CalendarState
3. Session counts and attendance rates
"""

from datetime import datetime, timedelta

import pytest

from club_calendar.models.event import EventColor, EventType
from club_calendar.models.session import Attendance, Organization, TrainingSession
from club_calendar.models.settings import ViewMode
from club_calendar.scheduling.state import CalendarState
from club_calendar.sessions.handler import TrainingSessionHandler, schedule_url
from club_calendar.sessions.mapping import event_to_session_data, session_end, session_to_event
from club_calendar.sessions.repository import InMemorySessionRepository
from club_calendar.sessions.stats import (
    attendance_rate,
    compute_session_stats,
    member_attendance_rate,
    session_attendance_rate,
)
from club_calendar.utils.exceptions import SessionNotFoundError


@pytest.fixture
def organization():
    return Organization(id="org-1", name="FC Example", slug="fc-example", logo="/logo.png")


def _session(session_id, day, start_time="18:00", end_time="19:30", attendances=()):
    hour, minute = (int(p) for p in start_time.split(":"))
    return TrainingSession(
        id=session_id,
        organization_id="org-1",
        date=day.replace(hour=hour, minute=minute),
        start_time=start_time,
        end_time=end_time,
        description=f"Session {session_id}",
        attendances=list(attendances),
    )


def _attendance(member_id, status, session_id="s1"):
    return Attendance(
        id=f"{session_id}-{member_id}", member_id=member_id, session_id=session_id, status=status
    )


class TestMapping:
    """Tests for session <-> event mapping"""

    def test_session_to_event(self, organization):
        session = _session("s1", datetime(2024, 5, 6))
        event = session_to_event(session, organization)
        assert event.id == "s1"
        assert event.start == datetime(2024, 5, 6, 18, 0)
        assert event.end == datetime(2024, 5, 6, 19, 30)
        assert event.color == EventColor.BLUE
        assert event.type == EventType.TRAINING
        assert event.user.id == "org-1"
        assert event.user.picture_path == "/logo.png"

    @pytest.mark.parametrize("end_time", ["", "25:00", "soon", "17:00"])
    def test_bad_end_time_defaults_to_one_hour(self, end_time):
        session = _session("s1", datetime(2024, 5, 6), end_time=end_time)
        assert session_end(session) == session.date + timedelta(hours=1)

    def test_event_to_session_data(self, make_event):
        event = make_event("a")
        data = event_to_session_data(event, "org-1")
        assert data["organization_id"] == "org-1"
        assert data["date"] == event.start
        assert data["start_time"] == "18:00"
        assert data["end_time"] == "19:30"


class TestTrainingSessionHandler:
    """Tests for TrainingSessionHandler with CalendarState"""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, organization, make_event):
        repository = InMemorySessionRepository([_session("s1", datetime(2024, 5, 6))])
        handler = TrainingSessionHandler(repository, organization, reference=datetime(2024, 5, 6))
        state = CalendarState(events=await handler.load_events(), handlers=handler)

        added = await state.add_event(
            make_event(
                "client-id", start=datetime(2024, 5, 8, 17, 0), end=datetime(2024, 5, 8, 18, 30)
            )
        )
        assert added.id != "client-id"
        assert added.id in repository.sessions
        assert repository.sessions[added.id].start_time == "17:00"

        moved = added.model_copy(update={"start": datetime(2024, 5, 8, 18, 0)})
        await state.update_event(moved)
        assert repository.sessions[added.id].start_time == "18:00"
        assert state.get_event(added.id).start == datetime(2024, 5, 8, 18, 0)

        await state.remove_event("s1")
        assert "s1" not in repository.sessions
        assert [e.id for e in state.all_events] == [added.id]

    @pytest.mark.asyncio
    async def test_missing_session_propagates(self, organization, make_event):
        handler = TrainingSessionHandler(InMemorySessionRepository(), organization)
        state = CalendarState(events=[make_event("ghost")], handlers=handler)
        with pytest.raises(SessionNotFoundError):
            await state.remove_event("ghost")
        assert [e.id for e in state.all_events] == ["ghost"]

    @pytest.mark.asyncio
    async def test_load_events_in_range(self, organization):
        repository = InMemorySessionRepository(
            [
                _session("late", datetime(2024, 5, 20)),
                _session("early", datetime(2024, 5, 6)),
                _session("june", datetime(2024, 6, 3)),
            ]
        )
        handler = TrainingSessionHandler(repository, organization)
        events = await handler.load_events(datetime(2024, 5, 1), datetime(2024, 5, 31, 23, 59))
        assert [e.id for e in events] == ["early", "late"]

    @pytest.mark.asyncio
    async def test_navigation_updates_url(self, organization):
        handler = TrainingSessionHandler(
            InMemorySessionRepository(), organization, reference=datetime(2024, 1, 3)
        )
        state = CalendarState(handlers=handler)
        await state.set_view("week")
        assert handler.current_url == "/fc-example/sessions?view=week&week=2024-W01"
        await state.select_date(datetime(2024, 2, 14))
        assert handler.current_url == "/fc-example/sessions?view=week&week=2024-W07"

    def test_schedule_url(self, organization):
        day = datetime(2024, 2, 14)
        assert schedule_url(organization, ViewMode.DAY, day).endswith("view=day&date=2024-02-14")
        assert schedule_url(organization, ViewMode.MONTH, day).endswith("view=month&month=2024-02")


class TestStats:
    """Tests for session statistics"""

    def test_session_counts(self):
        now = datetime(2024, 5, 10, 12, 0)
        sessions = [
            _session("past", datetime(2024, 5, 1), attendances=[_attendance("m1", "present")]),
            _session(
                "future",
                datetime(2024, 5, 20),
                attendances=[_attendance("m1", "absent"), _attendance("m2", "present")],
            ),
            _session("now", datetime(2024, 5, 10), start_time="12:00"),
        ]
        stats = compute_session_stats(sessions, now=now)
        assert stats.total == 3
        assert stats.upcoming == 1
        assert stats.past == 1
        assert stats.total_attendances == 3

    def test_attendance_rate_rounds_half_up(self):
        records = [_attendance(f"m{i}", "present") for i in range(1)] + [
            _attendance(f"x{i}", "absent") for i in range(7)
        ]
        # 1/8 = 12.5%
        assert attendance_rate(records) == 13

    def test_attendance_rate_without_records(self):
        assert attendance_rate([]) == 0

    def test_late_is_not_present(self):
        records = [_attendance("m1", "present"), _attendance("m2", "late")]
        assert session_attendance_rate(_session("s1", datetime(2024, 5, 1), attendances=records)) == 50

    def test_member_rate_across_sessions(self):
        sessions = [
            _session("s1", datetime(2024, 5, 1), attendances=[_attendance("m1", "present", "s1")]),
            _session("s2", datetime(2024, 5, 2), attendances=[_attendance("m1", "absent", "s2")]),
            _session("s3", datetime(2024, 5, 3), attendances=[_attendance("m1", "present", "s3")]),
        ]
        assert member_attendance_rate(sessions, "m1") == 67
        assert member_attendance_rate(sessions, "m2") == 0
