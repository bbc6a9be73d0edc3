"""Centralized configuration for docs-search-index using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    search_index_dir: Path = Field(
        default=Path("html/search"),
        description="Directory holding the generated partition files (Doxygen search/ directory)",
    )
    partition_pattern: str = Field(default="*.js", min_length=1, description="Glob selecting partition files")

    max_results: int = Field(default=20, ge=1, description="Default cap on returned matches")
    suggestion_limit: int = Field(default=5, ge=0, description="Maximum 'did you mean' suggestions")

    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="warning", description="Logging level"
    )
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value
