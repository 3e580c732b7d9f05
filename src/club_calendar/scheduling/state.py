"""Calendar state container and event mutations."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Iterable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional, TypeVar, Union

from ..handlers.base import CalendarHandlers, CallbackHandlers, interpret_result, resolve_event
from ..models.event import CalendarEvent, EventColor, EventUser
from ..models.settings import AgendaGroupBy, BadgeVariant, CalendarSettings, ViewMode
from ..settings.store import InMemorySettingsStorage, SettingsService, SettingsStorage
from ..utils.date_utils import normalize_timestamp
from ..utils.exceptions import MutationTimeoutError
from .filters import FilterState, apply_filters, passes_filters
from .ranges import DateRange, events_in_range, resolve_range

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CalendarState:
    """
    Events, filters and preferences behind one calendar instance.

    Mutations are applied locally only after the host's persistence callback
    resolves. Mutations of the same event id are serialized; mutations of
    different ids may interleave and are applied in the order their
    callbacks resolve.
    """

    def __init__(
        self,
        events: Optional[Iterable[CalendarEvent]] = None,
        users: Optional[Iterable[EventUser]] = None,
        view: Union[ViewMode, str] = ViewMode.DAY,
        badge: Union[BadgeVariant, str] = BadgeVariant.COLORED,
        handlers: Optional[CalendarHandlers] = None,
        settings_storage: Optional[SettingsStorage] = None,
        mutation_timeout: Optional[float] = None,
        selected_date: Optional[datetime] = None,
    ):
        """
        Initialize calendar state.

        Args:
            events: Persisted events to start with
            users: Users that can own events
            view: Starting view, used unless a stored preference exists
            badge: Starting badge variant, used unless a stored preference exists
            handlers: Host callbacks (None means nothing is persisted)
            settings_storage: Backend for display preferences
            mutation_timeout: Seconds to wait for a persistence callback
                (None waits indefinitely)
            selected_date: Reference date of the views (defaults to now)
        """
        self.users: list[EventUser] = list(users or [])
        self.handlers = handlers or CallbackHandlers()
        self.settings = SettingsService(
            settings_storage or InMemorySettingsStorage(),
            defaults=CalendarSettings(badge_variant=badge, view=view),
        )
        self.filters = FilterState()
        self.selected_date = selected_date or datetime.now()
        self.mutation_timeout = mutation_timeout

        self._all_events: list[CalendarEvent] = list(events or [])
        self._visible_events: list[CalendarEvent] = list(self._all_events)
        self._in_flight = 0
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    # Read access

    @property
    def all_events(self) -> list[CalendarEvent]:
        return list(self._all_events)

    @property
    def events(self) -> list[CalendarEvent]:
        """Events passing the active filters."""
        return list(self._visible_events)

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def view(self) -> ViewMode:
        return self.settings.settings.view

    @property
    def badge_variant(self) -> BadgeVariant:
        return self.settings.settings.badge_variant

    @property
    def use_24_hour_format(self) -> bool:
        return self.settings.settings.use_24_hour_format

    @property
    def agenda_mode_group_by(self) -> AgendaGroupBy:
        return self.settings.settings.agenda_mode_group_by

    @property
    def selected_user_id(self) -> str:
        return self.filters.selected_user_id

    @property
    def selected_colors(self) -> list[EventColor]:
        return list(self.filters.selected_colors)

    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        return next((e for e in self._all_events if e.id == event_id), None)

    def visible_range(self, period: Optional[str] = None, now: Optional[datetime] = None) -> DateRange:
        """Window displayed by the current view around the selected date."""
        return resolve_range(self.view, self.selected_date, period=period, now=now)

    def events_in_view(self, period: Optional[str] = None) -> list[CalendarEvent]:
        """Visible events overlapping the current view's window."""
        start, end = self.visible_range(period)
        return events_in_range(self._visible_events, start, end)

    # Mutations

    @asynccontextmanager
    async def _mutation(self, event_id: str, action: str) -> AsyncIterator[None]:
        self._in_flight += 1
        if event_id not in self._locks:
            self._locks[event_id] = asyncio.Lock()
            self._lock_users[event_id] = 0
        self._lock_users[event_id] += 1
        try:
            async with self._locks[event_id]:
                yield
        except Exception as e:
            logger.error(f"Failed to {action} {event_id}: {e}")
            raise
        finally:
            self._in_flight -= 1
            self._lock_users[event_id] -= 1
            # Last holder or waiter for this id
            if not self._lock_users[event_id]:
                del self._locks[event_id]
                del self._lock_users[event_id]

    async def _await_callback(self, callback: Awaitable[T]) -> T:
        if self.mutation_timeout is None:
            return await callback
        try:
            return await asyncio.wait_for(callback, self.mutation_timeout)
        except asyncio.TimeoutError as e:
            raise MutationTimeoutError(
                f"Persistence callback did not resolve within {self.mutation_timeout}s"
            ) from e

    async def add_event(self, candidate: CalendarEvent) -> CalendarEvent:
        """
        Persist and add a new event.

        Args:
            candidate: Fully formed event

        Returns:
            The event stored locally (the callback's result, or the candidate)

        Raises:
            Exception: Whatever the callback raised; local state is unchanged
        """
        async with self._mutation(candidate.id, "add event"):
            raw: Any = await self._await_callback(self.handlers.on_add_event(candidate))
            event = resolve_event(interpret_result(raw), candidate)

            self._all_events.append(event)
            if passes_filters(event, self.filters):
                self._visible_events.append(event)

        logger.debug(f"Added event {event.id}")
        return event

    async def update_event(self, event: CalendarEvent) -> CalendarEvent:
        """
        Persist a modification and replace every local copy of the event.

        Start and end are normalized before the callback sees them: aware
        datetimes are converted to UTC, naive ones are kept as wall-clock time.

        Raises:
            Exception: Whatever the callback raised; local state is unchanged
        """
        normalized = event.model_copy(
            update={
                "start": normalize_timestamp(event.start),
                "end": normalize_timestamp(event.end),
            }
        )

        async with self._mutation(event.id, "update event"):
            raw: Any = await self._await_callback(self.handlers.on_update_event(normalized))
            updated = resolve_event(interpret_result(raw), normalized)

            self._all_events = [updated if e.id == event.id else e for e in self._all_events]
            self._visible_events = [
                updated if e.id == event.id else e for e in self._visible_events
            ]

        logger.debug(f"Updated event {event.id}")
        return updated

    async def remove_event(self, event_id: str) -> None:
        """
        Persist a removal and drop every local copy of the event.

        Raises:
            Exception: Whatever the callback raised; local state is unchanged
        """
        async with self._mutation(event_id, "remove event"):
            await self._await_callback(self.handlers.on_delete_event(event_id))

            self._all_events = [e for e in self._all_events if e.id != event_id]
            self._visible_events = [e for e in self._visible_events if e.id != event_id]

        logger.debug(f"Removed event {event_id}")

    # Navigation

    async def set_view(self, view: Union[ViewMode, str]) -> bool:
        """
        Switch view after notifying the host.

        Returns:
            True if the view changed, False if the host callback failed
        """
        view = ViewMode(view)
        self._in_flight += 1
        try:
            await self.handlers.on_change_view(view)
        except Exception as e:
            logger.error(f"Failed to change view: {e}")
            return False
        finally:
            self._in_flight -= 1

        self.settings.set_view(view)
        return True

    async def select_date(self, selected: Optional[datetime]) -> bool:
        """
        Move the reference date after notifying the host.

        Returns:
            True if the date changed, False if ``selected`` is None or the host
            callback failed
        """
        if selected is None:
            return False

        self._in_flight += 1
        try:
            await self.handlers.on_change_date(selected)
        except Exception as e:
            logger.error(f"Failed to change date: {e}")
            return False
        finally:
            self._in_flight -= 1

        self.selected_date = selected
        return True

    # Filters

    def _refilter(self) -> None:
        if self.filters.is_active:
            self._visible_events = apply_filters(self._all_events, self.filters)
        else:
            self._visible_events = list(self._all_events)

    def filter_by_user(self, user_id: str) -> list[CalendarEvent]:
        """Show only events owned by ``user_id`` (``"all"`` shows everyone's)."""
        self.filters = self.filters.select_user(user_id)
        self._refilter()
        return self.events

    def filter_by_color(self, color: Union[EventColor, str]) -> list[CalendarEvent]:
        """Toggle ``color`` in the color filter."""
        self.filters = self.filters.toggle_color(color)
        self._refilter()
        return self.events

    def clear_filter(self) -> list[CalendarEvent]:
        self.filters = self.filters.clear()
        self._refilter()
        return self.events

    # Preferences

    def set_badge_variant(self, variant: Union[BadgeVariant, str]) -> None:
        self.settings.set_badge_variant(variant)

    def toggle_time_format(self) -> None:
        self.settings.toggle_time_format()

    def set_agenda_mode_group_by(self, group_by: Union[AgendaGroupBy, str]) -> None:
        self.settings.set_agenda_mode_group_by(group_by)
