"""Persistence of calendar display preferences."""

import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..models.settings import AgendaGroupBy, BadgeVariant, CalendarSettings, ViewMode
from ..utils.exceptions import SettingsStorageError

logger = logging.getLogger(__name__)

SETTINGS_KEY = "calendar-settings"


class SettingsStorage(ABC):
    """Abstract key/value backend for settings."""

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """
        Read a stored value.

        Args:
            key: Storage key

        Returns:
            Decoded value, or None if nothing is stored

        Raises:
            SettingsStorageError: If the backend cannot be read
        """

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value.

        Raises:
            SettingsStorageError: If the backend cannot be written
        """


class InMemorySettingsStorage(SettingsStorage):
    """Process-local storage, mainly for tests."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self.values: dict[str, Any] = dict(initial or {})

    def read(self, key: str) -> Optional[Any]:
        return self.values.get(key)

    def write(self, key: str, value: Any) -> None:
        self.values[key] = value


class JsonFileSettingsStorage(SettingsStorage):
    """Stores all keys in one JSON document on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SettingsStorageError(f"Failed to read settings from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsStorageError(f"Settings file {self.path} is not a JSON object")
        return data

    def read(self, key: str) -> Optional[Any]:
        return self._load_document().get(key)

    def write(self, key: str, value: Any) -> None:
        try:
            document = self._load_document()
        except SettingsStorageError:
            # Unreadable documents are replaced rather than blocking writes
            document = {}
        document[key] = value

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise SettingsStorageError(f"Failed to write settings to {self.path}: {e}") from e


class SettingsService:
    """In-memory settings backed by a best-effort write-through store."""

    def __init__(
        self,
        storage: SettingsStorage,
        defaults: Optional[CalendarSettings] = None,
        key: str = SETTINGS_KEY,
    ):
        """
        Initialize the settings service and read the stored preferences.

        Args:
            storage: Backend to read from and write through to
            defaults: Settings used when nothing valid is stored
            key: Storage key of the settings document
        """
        self.storage = storage
        self.defaults = defaults or CalendarSettings()
        self.key = key
        self._settings = self._load()

    @property
    def settings(self) -> CalendarSettings:
        return self._settings

    def _load(self) -> CalendarSettings:
        try:
            stored = self.storage.read(self.key)
        except Exception as e:
            # Any backend failure means defaults
            logger.warning(f"Settings storage unavailable, using defaults: {e}")
            return self.defaults

        if stored is None:
            return self.defaults
        if not isinstance(stored, Mapping):
            logger.warning(f"Ignoring malformed stored settings: {stored!r}")
            return self.defaults

        try:
            return CalendarSettings.model_validate({**self.defaults.model_dump(), **stored})
        except ValidationError as e:
            logger.warning(f"Ignoring invalid stored settings: {e}")
            return self.defaults

    def _save(self) -> None:
        try:
            self.storage.write(self.key, self._settings.model_dump(mode="json"))
        except Exception as e:
            logger.warning(f"Failed to persist calendar settings: {e}")

    def update(self, **changes: Any) -> CalendarSettings:
        """
        Change one or more preferences and write them through.

        Raises:
            ValidationError: If a value is not allowed
        """
        self._settings = CalendarSettings.model_validate(
            {**self._settings.model_dump(), **changes}
        )
        self._save()
        return self._settings

    def set_badge_variant(self, variant: Union[BadgeVariant, str]) -> CalendarSettings:
        return self.update(badge_variant=variant)

    def set_view(self, view: Union[ViewMode, str]) -> CalendarSettings:
        return self.update(view=view)

    def toggle_time_format(self) -> CalendarSettings:
        return self.update(use_24_hour_format=not self._settings.use_24_hour_format)

    def set_agenda_mode_group_by(self, group_by: Union[AgendaGroupBy, str]) -> CalendarSettings:
        return self.update(agenda_mode_group_by=group_by)

    def reset(self) -> CalendarSettings:
        """Restore the defaults and persist them."""
        self._settings = self.defaults
        self._save()
        return self._settings
