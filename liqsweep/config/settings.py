"""
LiqSweep Configuration Settings
Uses pydantic-settings for environment-based configuration management.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log format"
    )
    json_format: bool = Field(default=False, description="Use JSON format for structured logs")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_bytes: int = Field(default=10_485_760, description="Max log file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")

    @field_validator("level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        """Accept any case, store upper case."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level


class ApplicationSettings(BaseSettings):
    """Main application settings aggregating all sub-settings."""
    model_config = SettingsConfigDict(
        env_prefix="LIQSWEEP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_name: str = Field(default="LiqSweep", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    default_config_path: Optional[str] = Field(
        default=None, description="Run config used when the CLI gets no --config"
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache()
def get_settings() -> ApplicationSettings:
    """
    Get cached application settings.

    Returns:
        ApplicationSettings: The application settings instance.
    """
    return ApplicationSettings()
