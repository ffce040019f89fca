"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.availability import DEFAULT_BUFFER_MINUTES
from .domain.models import BusinessHours
from .services.slot_search import (
    DEFAULT_LIMIT,
    DEFAULT_SEARCH_DAYS,
    MAX_LIMIT,
    MAX_SEARCH_DAYS,
    MIN_LIMIT,
    MIN_SEARCH_DAYS,
)


class GoogleCalendarConfig(BaseModel):
    """Shop calendar and service account settings."""
    calendar_id: str = "primary"
    service_account_file: Optional[Path] = None
    service_account_email: Optional[str] = None
    private_key: Optional[str] = None

    def has_credentials(self) -> bool:
        return self.service_account_file is not None or (
            bool(self.service_account_email) and bool(self.private_key)
        )


class BusinessHoursConfig(BaseModel):
    """Opening hours on the business clock (UTC+09:00)."""
    open_hour: int = 10
    close_hour: int = 18
    long_duration_threshold_minutes: int = Field(default=300, ge=60)

    @field_validator("open_hour", "close_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_order(self) -> "BusinessHoursConfig":
        if self.close_hour <= self.open_hour:
            raise ValueError(
                f"close_hour ({self.close_hour}) must be later than open_hour ({self.open_hour})"
            )
        return self

    def to_business_hours(self) -> BusinessHours:
        return BusinessHours(
            open_hour=self.open_hour,
            close_hour=self.close_hour,
            long_duration_threshold_minutes=self.long_duration_threshold_minutes,
        )


class SearchConfig(BaseModel):
    """Defaults for the nearest-slot search and the availability buffer."""
    limit: int = Field(default=DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)
    search_days: int = Field(default=DEFAULT_SEARCH_DAYS, ge=MIN_SEARCH_DAYS, le=MAX_SEARCH_DAYS)
    buffer_minutes: int = Field(default=DEFAULT_BUFFER_MINUTES, ge=0)


class AppConfig(BaseModel):
    """Application configuration."""
    google: GoogleCalendarConfig = Field(default_factory=GoogleCalendarConfig)
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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

        with open(config_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        return cls(**data)


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
