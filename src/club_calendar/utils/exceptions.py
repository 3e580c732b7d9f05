"""Custom exceptions for the club calendar."""


class ClubCalendarError(Exception):
    """Base exception for club calendar errors."""


class EventValidationError(ClubCalendarError):
    """Raised when user input cannot be turned into a valid event."""


class CallbackResultError(ClubCalendarError):
    """Raised when a persistence callback returns something that is not an event."""


class MutationTimeoutError(ClubCalendarError):
    """Raised when a persistence callback does not resolve in time."""


class SettingsStorageError(ClubCalendarError):
    """Raised when settings storage cannot be read or written."""


class SessionNotFoundError(ClubCalendarError):
    """Raised when a training session does not exist."""


class ConfigurationError(ClubCalendarError):
    """Raised when configuration is invalid."""
