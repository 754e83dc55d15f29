"""Application settings for the matching engine."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    database_path: Path = Field(
        default=Path("./data/matching.db"),
        description="Path to the SQLite database holding profiles and cached scores",
    )

    # Ranking
    synthetic_email_domain: str = Field(
        default="@matchlab.test",
        description="Email suffix identifying synthetic seed accounts (ranked last)",
    )
    recommendation_limit: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Default number of recommendations returned",
    )
    relaxation_suggestion_limit: Annotated[int, Field(ge=0)] = Field(
        default=2,
        description="Maximum relaxation suggestions attached to recommendations",
    )
    explore_page_size: Annotated[int, Field(gt=0)] = Field(
        default=20,
        description="Default page size for explore results",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("synthetic_email_domain", mode="before")
    @classmethod
    def normalize_synthetic_domain(cls, v: str) -> str:
        """Store the domain as a lowercase ``@domain`` suffix."""
        value = str(v).strip().lower()
        if not value:
            raise ValueError("synthetic_email_domain must not be empty")
        if not value.startswith("@"):
            value = f"@{value}"
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
