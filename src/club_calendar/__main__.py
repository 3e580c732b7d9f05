"""CLI entry point for the club calendar."""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytz
from pydantic import TypeAdapter, ValidationError

from .config import ClubConfig, config
from .models.event import CalendarEvent, EventColor
from .models.settings import ViewMode
from .scheduling.ranges import events_in_range, period_token
from .scheduling.state import CalendarState
from .settings.store import JsonFileSettingsStorage
from .utils.date_utils import format_time
from .utils.exceptions import ClubCalendarError, EventValidationError
from .utils.logging import setup_logging

_EVENT_LIST = TypeAdapter(list[CalendarEvent])


def load_events(path: Path, timezone: str = "UTC") -> list[CalendarEvent]:
    """
    Load events from a JSON array and convert them to ``timezone``.

    Raises:
        EventValidationError: If the file cannot be read or holds invalid events
    """
    try:
        events = _EVENT_LIST.validate_json(path.read_bytes())
    except OSError as e:
        raise EventValidationError(f"Cannot read events file {path}: {e}") from e
    except ValidationError as e:
        raise EventValidationError(f"Invalid events in {path}: {e}") from e
    return [e.to_local_time(timezone) for e in events]


def _period_for(view: ViewMode, args: argparse.Namespace) -> Optional[str]:
    if view == ViewMode.DAY:
        return args.date
    if view == ViewMode.WEEK:
        return args.week
    return args.month


def _print_settings(state: CalendarState) -> None:
    print("Calendar settings:")
    for key, value in state.settings.settings.model_dump(mode="json").items():
        print(f"  {key}: {value}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Club Calendar - Inspect training sessions by view, period and filters"
    )
    parser.add_argument(
        "--events",
        type=Path,
        help="JSON file with a list of events",
    )
    parser.add_argument(
        "--view",
        choices=[v.value for v in ViewMode],
        default=None,
        help="View mode (default: stored preference)",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Day to show in day view (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--week",
        type=str,
        default=None,
        help="ISO week to show in week view (YYYY-Www, e.g. 2024-W01)",
    )
    parser.add_argument(
        "--month",
        type=str,
        default=None,
        help="Month to show in month and agenda views (YYYY-MM)",
    )
    parser.add_argument(
        "--user",
        type=str,
        default=None,
        help="Only show events owned by this user id",
    )
    parser.add_argument(
        "--color",
        action="append",
        choices=[c.value for c in EventColor],
        default=[],
        help="Only show events with this color (repeatable)",
    )
    parser.add_argument(
        "--show-settings",
        action="store_true",
        help="Print stored calendar settings",
    )
    parser.add_argument(
        "--reset-settings",
        action="store_true",
        help="Restore default calendar settings",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.verbose else config.log_level
    logger = setup_logging(level=log_level, log_file=config.log_file)

    try:
        club = ClubConfig(config.club_config_path)
        events = load_events(args.events, config.timezone) if args.events else []

        state = CalendarState(
            events=events,
            users=club.users,
            view=club.default_view,
            badge=club.default_badge,
            settings_storage=JsonFileSettingsStorage(config.settings_file),
            mutation_timeout=config.mutation_timeout,
            selected_date=datetime.now(pytz.timezone(config.timezone)),
        )

        if args.reset_settings:
            state.settings.reset()
            logger.info("Calendar settings reset to defaults")

        if args.show_settings or args.reset_settings:
            _print_settings(state)
            return 0

        if args.view and not asyncio.run(state.set_view(args.view)):
            return 1

        if args.user:
            state.filter_by_user(args.user)
        for color in dict.fromkeys(args.color):
            state.filter_by_color(color)

        view = state.view
        start, end = state.visible_range(_period_for(view, args))
        visible = events_in_range(state.events, start, end)
        use_24h = state.use_24_hour_format

        print(f"\n{view.value.capitalize()} {period_token(view, start)}")
        print(f"  From: {start.strftime('%Y-%m-%d')} {format_time(start, use_24h)}")
        print(f"  To:   {end.strftime('%Y-%m-%d')} {format_time(end, use_24h)}")
        print(f"\nFound {len(visible)} event(s):")
        for event in sorted(visible, key=lambda e: e.start):
            owner = event.user.name if event.user else "None"
            print(f"  - {event.title} [{event.effective_color.value}]")
            print(
                f"    When: {event.start.strftime('%Y-%m-%d')} "
                f"{format_time(event.start, use_24h)} - {format_time(event.end, use_24h)}"
            )
            print(f"    Owner: {owner}")
            if event.location:
                print(f"    Location: {event.location}")
        return 0

    except ClubCalendarError as e:
        logger.error(f"Club calendar error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
