"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WEEKDAY_NAMES, AvailabilityWindow, BreakRule, WeeklyTemplate
from .domain.time_codec import parse_time

# Session lengths an expert may offer
ALLOWED_SLOT_DURATIONS = (15, 30, 60)


def _validate_slot_duration(value: int) -> int:
    if value not in ALLOWED_SLOT_DURATIONS:
        allowed = ", ".join(str(d) for d in ALLOWED_SLOT_DURATIONS)
        raise ValueError(f"slot_duration must be one of {allowed}, got {value}")
    return value


class DefaultsConfig(BaseModel):
    """Default settings applied when an expert does not override them."""
    slot_duration: int = 60

    @field_validator("slot_duration")
    @classmethod
    def validate_slot_duration(cls, value: int) -> int:
        """Ensure the default session length is supported."""
        return _validate_slot_duration(value)


class WindowConfig(BaseModel):
    """One working window in ``HH:MM`` notation."""
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate the HH:MM format."""
        parse_time(value)
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "WindowConfig":
        """Ensure the window opens before it closes."""
        self.to_window()
        return self

    def to_window(self) -> AvailabilityWindow:
        return AvailabilityWindow.from_strings(self.start, self.end)


class BreakTimeConfig(WindowConfig):
    """A recurring break; ``days`` uses 0 = Sunday through 6 = Saturday."""
    days: List[int] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"days must be between 0 (Sunday) and 6 (Saturday), got {invalid_days}")
        # Preserve order while removing duplicates
        return list(dict.fromkeys(value))

    def to_break_rule(self) -> BreakRule:
        return BreakRule.from_strings(self.start, self.end, self.days)


class ExpertProfile(BaseModel):
    """An expert's bookable schedule."""
    id: str
    name: str
    slot_duration: Optional[int] = None
    availability: Dict[str, List[WindowConfig]] = Field(default_factory=dict)
    break_times: List[BreakTimeConfig] = Field(default_factory=list)

    @field_validator("slot_duration")
    @classmethod
    def validate_slot_duration(cls, value: Optional[int]) -> Optional[int]:
        """Ensure an overridden session length is supported."""
        if value is None:
            return value
        return _validate_slot_duration(value)

    @field_validator("availability")
    @classmethod
    def validate_weekdays(cls, value: Dict[str, List[WindowConfig]]) -> Dict[str, List[WindowConfig]]:
        """Normalise weekday names and reject unknown ones."""
        normalized: Dict[str, List[WindowConfig]] = {}
        for name, windows in value.items():
            key = name.lower()
            if key not in WEEKDAY_NAMES:
                raise ValueError(f"Unknown weekday in availability: {name}")
            if key in normalized:
                raise ValueError(f"Weekday listed more than once in availability: {name}")
            normalized[key] = windows
        return normalized

    def effective_duration(self, defaults: "DefaultsConfig") -> int:
        """Get the expert's slot duration, falling back to the defaults."""
        return self.slot_duration if self.slot_duration is not None else defaults.slot_duration

    def to_template(self) -> WeeklyTemplate:
        return WeeklyTemplate(
            days={
                name: tuple(window.to_window() for window in windows)
                for name, windows in self.availability.items()
            }
        )

    def to_break_rules(self) -> List[BreakRule]:
        return [break_time.to_break_rule() for break_time in self.break_times]


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Kolkata"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    experts: List[ExpertProfile] = Field(default_factory=list)
    bookings_file: Optional[Path] = None
    log_level: str = "WARNING"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names in any case."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("experts")
    @classmethod
    def validate_experts(cls, value: List[ExpertProfile]) -> List[ExpertProfile]:
        """Ensure expert ids are unique."""
        seen_ids: set[str] = set()
        for expert in value:
            if expert.id in seen_ids:
                raise ValueError(f"Duplicate expert id detected: {expert.id}")
            seen_ids.add(expert.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``bookings_file`` paths are resolved against the config
        file's directory.

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
        if config.bookings_file is not None and not config.bookings_file.is_absolute():
            config.bookings_file = config_path.parent / config.bookings_file
        return config

    def find_expert(self, identifier: str) -> ExpertProfile | None:
        """Find an expert by id, or by name ignoring case."""
        for expert in self.experts:
            if expert.id == identifier:
                return expert
        for expert in self.experts:
            if expert.name.lower() == identifier.lower():
                return expert
        return None


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
