"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date
from pathlib import Path
from typing import List

import pendulum
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .domain.models import Calendar, CalendarRules, OpenHours

ALLOWED_SLOT_DURATIONS = (15, 30, 45, 60, 90, 120)


def _validate_timezone(value: str) -> str:
    try:
        pendulum.timezone(value)
    except Exception as exc:
        raise ValueError(f"Unknown timezone: '{value}'") from exc
    return value


class HoursConfig(BaseModel):
    """Daily open window in hours since midnight (9.5 = 09:30)."""
    start: float = 9
    end: float = 17

    @field_validator("start", "end")
    @classmethod
    def validate_hour(cls, v: float) -> float:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "HoursConfig":
        """Ensure the configured window opens before it closes."""
        if self.end <= self.start:
            raise ValueError("end must be later than start")
        return self


class CalendarConfig(BaseModel):
    """
    A calendar definition as stored in the data file.

    Keys are accepted in snake_case or camelCase.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    public_id: str = ""
    description: str = ""
    owner_name: str = ""
    owner_email: str = ""
    timezone: str = "UTC"
    available_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])  # Monday to Friday
    available_hours: HoursConfig = Field(default_factory=HoursConfig)
    slot_duration: int = 60
    disabled_dates: List[date] = Field(default_factory=list)

    @field_validator("available_days")
    @classmethod
    def validate_available_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range (0=Sunday) and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"available_days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @field_validator("slot_duration")
    @classmethod
    def validate_slot_duration(cls, value: int) -> int:
        if value not in ALLOWED_SLOT_DURATIONS:
            raise ValueError(
                f"slot_duration must be one of {list(ALLOWED_SLOT_DURATIONS)}, got {value}"
            )
        return value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone(value)

    def to_calendar(self) -> Calendar:
        """Convert to the domain aggregate."""
        rules = CalendarRules(
            weekdays_open=frozenset(self.available_days),
            hours_open=OpenHours(
                start=self.available_hours.start,
                end=self.available_hours.end
            ),
            slot_duration_minutes=self.slot_duration,
            disabled_dates=frozenset(self.disabled_dates),
            timezone=self.timezone,
        )
        return Calendar(
            id=self.id,
            name=self.name,
            rules=rules,
            public_id=self.public_id,
            owner_name=self.owner_name,
            owner_email=self.owner_email,
            description=self.description,
        )

    @classmethod
    def from_calendar(cls, calendar: Calendar) -> "CalendarConfig":
        rules = calendar.rules
        return cls(
            id=calendar.id,
            name=calendar.name,
            public_id=calendar.public_id,
            description=calendar.description,
            owner_name=calendar.owner_name,
            owner_email=calendar.owner_email,
            timezone=rules.timezone,
            available_days=sorted(rules.weekdays_open),
            available_hours=HoursConfig(start=rules.hours_open.start, end=rules.hours_open.end),
            slot_duration=rules.slot_duration_minutes,
            disabled_dates=sorted(rules.disabled_dates),
        )


class NotificationConfig(BaseModel):
    """Mail relay settings for booking notifications."""
    enabled: bool = False
    endpoint: str = ""
    api_key: str = ""
    sender: str = "Schedly App <noreply@schedly.com>"
    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_endpoint(self) -> "NotificationConfig":
        """An enabled relay needs somewhere to post to."""
        if self.enabled and not self.endpoint:
            raise ValueError("notifications.endpoint is required when notifications are enabled")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path = Path("schedly_data.json")
    timezone: str = "UTC"
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone(value)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's folder.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if not config.data_file.is_absolute():
            config = config.model_copy(
                update={"data_file": config_path.parent / config.data_file}
            )
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
