"""Application settings loaded from environment."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Location engine settings, read from environment variables or .env.

    Attributes:
        location_dataset_path: JSON file holding the pincode directory.
        location_dataset_url: URL serving the same JSON; preferred over the
            file path when both are set.
        pincode_search_limit: Maximum results for a partial pincode query.
        location_search_limit: Maximum results for a name search.
        location_suggestion_limit: Maximum results for a scoped suggestion
            query that has typed text.
        fuzzy_match_threshold: Minimum rapidfuzz score (0-100) for the
            fuzzy name-search fallback.
        dataset_fetch_attempts: HTTP attempts made by the URL source.
        dataset_fetch_timeout: HTTP read timeout in seconds.
    """

    location_dataset_path: Optional[Path] = None
    location_dataset_url: Optional[str] = None

    pincode_search_limit: int = Field(default=20, ge=1)
    location_search_limit: int = Field(default=50, ge=1)
    location_suggestion_limit: int = Field(default=20, ge=1)
    fuzzy_match_threshold: float = Field(default=80.0, ge=0.0, le=100.0)

    dataset_fetch_attempts: int = Field(default=3, ge=1)
    dataset_fetch_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Uses ``lru_cache`` so the .env file is read at most once per process.
    """
    return Settings()
