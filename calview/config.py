"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.layout_engine import DEFAULT_PREVIEW_LIMITS, MIN_VISIBLE_HEIGHT
from .domain.models import EventDisplayMode


class StorageConfig(BaseModel):
    """Local SQLite storage."""
    database_path: Path = Path("calview.db")
    timeout_seconds: float = 5.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Every storage call must be bounded."""
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class LayoutConfig(BaseModel):
    """Layout engine tuning."""
    min_visible_height: float = MIN_VISIBLE_HEIGHT
    preview_limits: Dict[EventDisplayMode, int] = Field(
        default_factory=lambda: dict(DEFAULT_PREVIEW_LIMITS)
    )

    @field_validator("min_visible_height")
    @classmethod
    def validate_min_height(cls, value: float) -> float:
        """Height floor is a percentage of the day axis."""
        if not 0 < value <= 100:
            raise ValueError(f"min_visible_height must be in (0, 100], got {value}")
        return value

    @field_validator("preview_limits")
    @classmethod
    def validate_preview_limits(cls, value: Dict[EventDisplayMode, int]) -> Dict[EventDisplayMode, int]:
        negative = [mode.value for mode, limit in value.items() if limit < 0]
        if negative:
            raise ValueError(f"preview_limits must not be negative: {negative}")
        return value


class ApiConfig(BaseModel):
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False


class RemoteConfig(BaseModel):
    """Remote calendar API used by the CLI in ``--remote`` mode."""
    base_url: str = "http://127.0.0.1:8000"
    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    default_user_id: int = 1
    log_level: str = "INFO"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the display timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
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

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

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


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load the given config file, or the default one if it exists.

    An explicitly given path must exist; without one, a missing default
    file means built-in defaults.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()
