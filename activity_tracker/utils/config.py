"""Configuration management with YAML support and Pydantic validation."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class APIConfig(BaseModel):
    """Connection settings for the activity tracker backend."""

    base_url: str = Field(default="http://localhost:3000", description="Backend base URL")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, le=10, description="Connection retries per request")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended directly."""
        return v.rstrip("/")


class AutoCompleteConfig(BaseModel):
    """Suggestion engine behavior."""

    debounce_ms: int = Field(default=300, ge=0, description="Quiet window before a search fires")
    min_query_length: int = Field(default=0, ge=0, description="Shortest non-empty query that is searched")
    max_suggestions: int = Field(default=10, ge=1, le=50, description="Maximum suggestions requested")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure level is one the logging module understands."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_nested_delimiter="__",
    )

    api: APIConfig = Field(default_factory=APIConfig)
    autocomplete: AutoCompleteConfig = Field(default_factory=AutoCompleteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to config.yaml in CWD.

    Returns:
        Validated Config object.
    """
    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    config_data: dict[str, Any] = {}

    if config_path.exists():
        with open(config_path) as f:
            loaded = yaml.safe_load(f)
            if loaded:
                config_data = loaded

    return Config(**config_data)


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging for command line use."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

