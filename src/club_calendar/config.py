"""Configuration management for the club calendar."""

from pathlib import Path
from typing import Any, Optional

import pytz
import yaml
from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.event import EventUser
from .models.session import Organization
from .models.settings import BadgeVariant, ViewMode
from .utils.exceptions import ConfigurationError

load_dotenv()


class AppConfig(BaseSettings):
    """Application configuration."""

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    # Calendar
    settings_file: Path = Field(
        default=Path(".calendar_settings.json"), validation_alias="CALENDAR_SETTINGS_FILE"
    )
    timezone: str = Field(default="UTC", validation_alias="CALENDAR_TIMEZONE")
    mutation_timeout: Optional[float] = Field(
        default=None, validation_alias="CALENDAR_MUTATION_TIMEOUT"
    )

    club_config_path: Path = Field(
        default=Path("club_config.yaml"), validation_alias="CLUB_CONFIG_FILE"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @field_validator("mutation_timeout")
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("mutation_timeout must be positive")
        return value


class ClubConfig:
    """Club, users and calendar defaults loaded from YAML."""

    def __init__(self, config_path: Path = Path("club_config.yaml")):
        self.organization: Optional[Organization] = None
        self.users: list[EventUser] = []
        self.default_view: ViewMode = ViewMode.MONTH
        self.default_badge: BadgeVariant = BadgeVariant.COLORED

        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigurationError(f"Club configuration in {config_path} must be a mapping")
            self._apply(config_path, data)

    def _apply(self, config_path: Path, data: dict[str, Any]) -> None:
        try:
            if data.get("organization"):
                self.organization = Organization(**data["organization"])
            self.users = [EventUser(**u) for u in data.get("users") or []]

            calendar_data = data.get("calendar") or {}
            self.default_view = ViewMode(calendar_data.get("view", self.default_view))
            self.default_badge = BadgeVariant(calendar_data.get("badge", self.default_badge))
        except (AttributeError, TypeError, ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid club configuration in {config_path}: {e}") from e

    @property
    def has_config(self) -> bool:
        return self.organization is not None


# Global config instance
config = AppConfig()
