"""
Central configuration management using Pydantic settings.

Provides type-safe configuration with validation, environment variable
support (``TECHCALC_`` prefix) and YAML configuration file loading.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
CONFIG_DIR = Path(__file__).resolve().parent


class ValidationSettings(BaseModel):
    """Input validation limits."""

    max_array_size: int = Field(default=1_000_000, gt=0, description="Max elements in a price matrix")
    max_parameter_length: int = Field(
        default=100, gt=0, description="Max length of calculator names and parameter keys/values"
    )
    factory_max_key_length: int = Field(default=50, gt=0, description="Max parameter key length at the factory")
    factory_max_value_length: int = Field(
        default=100, gt=0, description="Max parameter value length at the factory"
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format (json or text)")
    file_path: Path | None = Field(default=None, description="Log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """Main package settings."""

    model_config = SettingsConfigDict(
        env_prefix="TECHCALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "Technical Calculators"
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load_yaml_config(cls, config_path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        if config_path.exists():
            with open(config_path, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def load_validation_config(self, config_path: Path | None = None) -> ValidationSettings:
        """Load validation limits from YAML, falling back to current values."""
        config = self.load_yaml_config(config_path or CONFIG_DIR / "limits.yaml")
        section = config.get("validation")
        if section:
            return ValidationSettings(**section)
        return self.validation


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Loads configuration in order:
    1. Base settings from environment and .env file
    2. Validation limits from limits.yaml when the environment sets none
    """
    settings = Settings()
    if "validation" not in settings.model_fields_set:
        settings.validation = settings.load_validation_config()
    return settings
