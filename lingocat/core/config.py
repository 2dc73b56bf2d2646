"""Library configuration via Pydantic Settings.

Reads environment variables (and optional .env file) and validates them.
Use ``get_settings()`` to obtain a cached singleton.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lingocat.i18n.bcp47 import is_valid_language_code


class Settings(BaseSettings):
    """Validated catalog settings sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Catalog location (empty = no file source) ----------------------
    CATALOG_DIR: str = ""
    CATALOG_SUFFIX: str = ".utxt"

    # --- Optional (with defaults) ----------------------------------------
    DEFAULT_LANGUAGE: str = "en-US"
    LOG_LEVEL: str = "INFO"
    MAX_RENDER_DEPTH: int = 64

    # --- Validators ------------------------------------------------------
    @property
    def use_catalog_dir(self) -> bool:
        """True when CATALOG_DIR is configured."""
        return bool(self.CATALOG_DIR)

    @field_validator("CATALOG_SUFFIX")
    @classmethod
    def _validate_suffix(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("CATALOG_SUFFIX must start with '.'")
        return v

    @field_validator("DEFAULT_LANGUAGE")
    @classmethod
    def _validate_default_language(cls, v: str) -> str:
        if not is_valid_language_code(v):
            raise ValueError(f"DEFAULT_LANGUAGE is not a valid language code: {v!r}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {v!r}")
        return level

    @field_validator("MAX_RENDER_DEPTH")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings singleton."""
    return Settings()
