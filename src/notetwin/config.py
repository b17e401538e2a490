"""Configuration management for Notetwin."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DIGITAL_TWIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # External vault database (read-only). Unset means local mode.
    db_path: Optional[Path] = Field(
        default=None,
        description="Path to an existing Digital Twin database (enables vault mode)",
    )

    # Local database
    local_db_path: Path = Field(
        default=Path("data/digital_twin.db"),
        description="Path to the in-app SQLite database used in local mode",
    )

    # Queries
    default_limit: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Default number of notes/insights returned by listings",
    )
    scan_limit: int = Field(
        default=500,
        ge=1,
        description="Recent rows fetched before in-memory category/search filtering",
    )

    @field_validator("db_path", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, value):
        """Treat an empty or whitespace-only path as not configured."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_local_mode(self) -> bool:
        """True when no vault database is configured. Enables uploads."""
        return self.db_path is None

    @property
    def database_path(self) -> Path:
        """Database file for the current mode."""
        return self.local_db_path if self.db_path is None else self.db_path


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
