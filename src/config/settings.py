# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for store, cache and logging settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Document store ===
    document_store_backend: Literal["memory", "arangodb"] = "memory"
    arangodb_url: str = "http://localhost:8529"
    arangodb_database: str = "docsearch"
    arangodb_user: str = "root"
    arangodb_password: str = ""

    # === Search cache ===
    search_cache_backend: Literal["memory", "redis", "arangodb"] = "memory"
    search_cache_ttl_seconds: int = 3600
    search_cache_redis_url: str = ""
    search_cache_collection: str = "search_results"

    # === Search defaults ===
    search_default_stemmer: str = "porter"
    search_default_distance: str = "jaro_winkler"
    search_relevance_threshold: float = 0.5

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("search_cache_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("search_cache_ttl_seconds must be > 0")
        return v

    @field_validator("search_relevance_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:  # noqa: N805
        """Distances live in [0, 1], so must the threshold."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("search_relevance_threshold must be within [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.search_cache_backend == "redis" and not self.search_cache_redis_url:
            errors.append(
                "SEARCH_CACHE_BACKEND=redis requires SEARCH_CACHE_REDIS_URL"
            )

        uses_arango = "arangodb" in (
            self.document_store_backend, self.search_cache_backend,
        )
        if uses_arango and not self.arangodb_url:
            errors.append("ArangoDB backends require ARANGODB_URL")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
