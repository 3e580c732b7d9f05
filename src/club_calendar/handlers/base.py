"""Persistence callbacks the calendar delegates mutations to."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from ..models.event import CalendarEvent
from ..models.settings import ViewMode
from ..utils.exceptions import CallbackResultError


class CalendarHandlers(ABC):
    """Abstract base class for the host's calendar callbacks."""

    @abstractmethod
    async def on_add_event(self, candidate: CalendarEvent) -> Optional[CalendarEvent]:
        """
        Persist a new event.

        Args:
            candidate: Event built on the client

        Returns:
            Canonical event (e.g. with a server-assigned id), or None to keep
            the candidate as is
        """

    @abstractmethod
    async def on_update_event(self, event: CalendarEvent) -> Optional[CalendarEvent]:
        """
        Persist a modification.

        Args:
            event: Event with normalized start/end

        Returns:
            Canonical event, or None to keep the input as is
        """

    @abstractmethod
    async def on_delete_event(self, event_id: str) -> None:
        """
        Persist a removal.

        Args:
            event_id: Identifier of the removed event
        """

    async def on_change_view(self, view: ViewMode) -> None:
        """Notify the host of a view change."""

    async def on_change_date(self, selected: datetime) -> None:
        """Notify the host of a reference-date change."""


AddCallback = Callable[[CalendarEvent], Awaitable[Optional[CalendarEvent]]]
UpdateCallback = Callable[[CalendarEvent], Awaitable[Optional[CalendarEvent]]]
DeleteCallback = Callable[[str], Awaitable[None]]
ViewCallback = Callable[[ViewMode], Awaitable[None]]
DateCallback = Callable[[datetime], Awaitable[None]]


class CallbackHandlers(CalendarHandlers):
    """Adapts plain async callables; missing callbacks behave as no-ops."""

    def __init__(
        self,
        on_add_event: Optional[AddCallback] = None,
        on_update_event: Optional[UpdateCallback] = None,
        on_delete_event: Optional[DeleteCallback] = None,
        on_change_view: Optional[ViewCallback] = None,
        on_change_date: Optional[DateCallback] = None,
    ):
        self._on_add_event = on_add_event
        self._on_update_event = on_update_event
        self._on_delete_event = on_delete_event
        self._on_change_view = on_change_view
        self._on_change_date = on_change_date

    async def on_add_event(self, candidate: CalendarEvent) -> Optional[CalendarEvent]:
        if self._on_add_event is None:
            return None
        return await self._on_add_event(candidate)

    async def on_update_event(self, event: CalendarEvent) -> Optional[CalendarEvent]:
        if self._on_update_event is None:
            return None
        return await self._on_update_event(event)

    async def on_delete_event(self, event_id: str) -> None:
        if self._on_delete_event is not None:
            await self._on_delete_event(event_id)

    async def on_change_view(self, view: ViewMode) -> None:
        if self._on_change_view is not None:
            await self._on_change_view(view)

    async def on_change_date(self, selected: datetime) -> None:
        if self._on_change_date is not None:
            await self._on_change_date(selected)


@dataclass(frozen=True)
class EchoInput:
    """The callback returned nothing: keep the event that was sent."""


@dataclass(frozen=True)
class CanonicalEvent:
    """The callback returned the persisted version of the event."""

    event: CalendarEvent


CallbackResult = Union[EchoInput, CanonicalEvent]


def interpret_result(result: Any) -> CallbackResult:
    """
    Classify what a persistence callback returned.

    Args:
        result: Raw callback return value

    Returns:
        EchoInput for None, CanonicalEvent for an event or a mapping that
        validates as one

    Raises:
        CallbackResultError: If the value is neither
    """
    if result is None:
        return EchoInput()
    if isinstance(result, CalendarEvent):
        return CanonicalEvent(result)
    if isinstance(result, Mapping):
        try:
            return CanonicalEvent(CalendarEvent.model_validate(dict(result)))
        except ValidationError as e:
            raise CallbackResultError(f"Callback returned an invalid event: {e}") from e
    raise CallbackResultError(
        f"Callback returned {type(result).__name__}, expected an event or None"
    )


def resolve_event(result: CallbackResult, sent: CalendarEvent) -> CalendarEvent:
    """Event to store locally for a classified callback result."""
    if isinstance(result, CanonicalEvent):
        return result.event
    return sent
