"""Session counts and attendance rates shown on the schedule pages."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..models.session import Attendance, AttendanceStatus, TrainingSession


@dataclass
class SessionStats:
    """Summary of an organization's sessions."""

    total: int = 0
    upcoming: int = 0
    past: int = 0
    total_attendances: int = 0


def compute_session_stats(
    sessions: Iterable[TrainingSession],
    now: Optional[datetime] = None,
) -> SessionStats:
    """
    Count sessions before and after ``now``.

    A session starting exactly at ``now`` is neither upcoming nor past.
    """
    now = now or datetime.now()
    stats = SessionStats()
    for session in sessions:
        stats.total += 1
        if session.date > now:
            stats.upcoming += 1
        elif session.date < now:
            stats.past += 1
        stats.total_attendances += len(session.attendances)
    return stats


def attendance_rate(attendances: Iterable[Attendance]) -> int:
    """Percentage of ``present`` records, rounded half up; 0 without records."""
    attendances = list(attendances)
    if not attendances:
        return 0
    present = sum(1 for a in attendances if a.status == AttendanceStatus.PRESENT)
    return math.floor(present * 100 / len(attendances) + 0.5)


def session_attendance_rate(session: TrainingSession) -> int:
    return attendance_rate(session.attendances)


def member_attendance_rate(sessions: Iterable[TrainingSession], member_id: str) -> int:
    """Attendance rate of one member across sessions."""
    return attendance_rate(
        a for s in sessions for a in s.attendances if a.member_id == member_id
    )
