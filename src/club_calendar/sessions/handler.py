"""Calendar callbacks backed by training-session storage."""

import logging
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from ..handlers.base import CalendarHandlers
from ..models.event import CalendarEvent
from ..models.session import Organization
from ..models.settings import ViewMode
from ..scheduling.ranges import period_token
from .mapping import event_to_session_data, session_to_event
from .repository import SessionRepository

logger = logging.getLogger(__name__)

# Query parameter carrying the period token of each view
_PERIOD_PARAMS = {
    ViewMode.DAY: "date",
    ViewMode.WEEK: "week",
    ViewMode.MONTH: "month",
    ViewMode.AGENDA: "month",
}


def schedule_url(organization: Organization, view: ViewMode, reference: datetime) -> str:
    """Schedule page location for a view and the period containing ``reference``."""
    view = ViewMode(view)
    query = urlencode({"view": view.value, _PERIOD_PARAMS[view]: period_token(view, reference)})
    return f"/{organization.slug}/sessions?{query}"


class TrainingSessionHandler(CalendarHandlers):
    """Persists calendar events as an organization's training sessions."""

    def __init__(
        self,
        repository: SessionRepository,
        organization: Organization,
        view: ViewMode = ViewMode.MONTH,
        reference: Optional[datetime] = None,
    ):
        """
        Initialize the handler.

        Args:
            repository: Session store
            organization: Club owning the sessions
            view: View the schedule page starts with
            reference: Date the schedule page starts on (defaults to now)
        """
        self.repository = repository
        self.organization = organization
        self.view = ViewMode(view)
        self.reference = reference or datetime.now()

    @property
    def current_url(self) -> str:
        return schedule_url(self.organization, self.view, self.reference)

    async def load_events(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[CalendarEvent]:
        """Events for the sessions starting within [start, end]."""
        sessions = await self.repository.list_sessions(start, end)
        return [session_to_event(s, self.organization) for s in sessions]

    async def on_add_event(self, candidate: CalendarEvent) -> Optional[CalendarEvent]:
        session = await self.repository.create(
            event_to_session_data(candidate, self.organization.id)
        )
        # The store assigns the id; display fields stay as entered
        return candidate.model_copy(update={"id": session.id})

    async def on_update_event(self, event: CalendarEvent) -> Optional[CalendarEvent]:
        await self.repository.update(event.id, event_to_session_data(event, self.organization.id))
        return None

    async def on_delete_event(self, event_id: str) -> None:
        await self.repository.delete(event_id)

    async def on_change_view(self, view: ViewMode) -> None:
        self.view = ViewMode(view)
        logger.debug(f"Schedule moved to {self.current_url}")

    async def on_change_date(self, selected: datetime) -> None:
        self.reference = selected
        logger.debug(f"Schedule moved to {self.current_url}")
