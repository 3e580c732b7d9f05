"""Training session records persisted by the host application."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AttendanceStatus(str, Enum):
    """Attendance status of a member for one session."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class Attendance(BaseModel):
    """Attendance record of a member at a training session."""

    id: str
    member_id: str
    session_id: str
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = None


class Organization(BaseModel):
    """Club (tenant) owning the sessions."""

    id: str
    name: str
    slug: str
    logo: Optional[str] = None

    model_config = {"frozen": True}


class TrainingSession(BaseModel):
    """Persisted training session."""

    id: str
    organization_id: str
    date: datetime  # start instant
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    description: Optional[str] = None
    location: Optional[str] = None
    group_ids: list[str] = Field(default_factory=list)
    attendances: list[Attendance] = Field(default_factory=list)
    created_at: Optional[datetime] = None
