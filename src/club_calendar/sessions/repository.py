"""Storage of training sessions."""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import pytz

from ..models.session import TrainingSession
from ..utils.exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)


class SessionRepository(ABC):
    """Abstract async store of training sessions."""

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> TrainingSession:
        """
        Create a session.

        Args:
            data: Session fields without an id

        Returns:
            Stored session with its assigned id
        """

    @abstractmethod
    async def update(self, session_id: str, data: dict[str, Any]) -> TrainingSession:
        """
        Update a session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """
        Delete a session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """

    @abstractmethod
    async def list_sessions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[TrainingSession]:
        """Sessions starting within [start, end], ordered by date."""


class InMemorySessionRepository(SessionRepository):
    """Keeps sessions in a dict."""

    def __init__(self, sessions: Optional[list[TrainingSession]] = None):
        self.sessions: dict[str, TrainingSession] = {s.id: s for s in sessions or []}

    async def create(self, data: dict[str, Any]) -> TrainingSession:
        session = TrainingSession(
            id=uuid.uuid4().hex,
            created_at=datetime.now(pytz.utc),
            **data,
        )
        self.sessions[session.id] = session
        logger.info(f"Created training session {session.id}")
        return session

    async def update(self, session_id: str, data: dict[str, Any]) -> TrainingSession:
        if session_id not in self.sessions:
            raise SessionNotFoundError(f"Training session {session_id} not found")
        updated = TrainingSession.model_validate(
            {**self.sessions[session_id].model_dump(), **data, "id": session_id}
        )
        self.sessions[session_id] = updated
        logger.info(f"Updated training session {session_id}")
        return updated

    async def delete(self, session_id: str) -> None:
        if self.sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Training session {session_id} not found")
        logger.info(f"Deleted training session {session_id}")

    async def list_sessions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[TrainingSession]:
        sessions = [
            s
            for s in self.sessions.values()
            if (start is None or s.date >= start) and (end is None or s.date <= end)
        ]
        return sorted(sessions, key=lambda s: s.date)
