"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/notegrimoire/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class CaptureConfig(BaseModel):
    """Tuning knobs for the selection-to-note pipeline."""

    # Class marker carried by the outermost tag of a rendered formula
    formula_marker: str = "katex"
    dewrap_passes: int = Field(default=3, ge=1)
    # Shortest unit the generic repeat collapse will fold ("ll" in "hello" is safe)
    repeat_min_period: int = Field(default=3, ge=1)
    repeat_max_passes: int = Field(default=50, ge=1)
    dedup_min_run: int = Field(default=12, ge=1)
    dedup_window: int = Field(default=120, ge=0)
    dedup_passes: int = Field(default=3, ge=1)

    @field_validator("formula_marker")
    @classmethod
    def marker_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "CAPTURE__FORMULA_MARKER must not be blank"
            raise ValueError(msg)
        return value


class CliConfig(BaseModel):
    """Command-line runtime configuration."""

    log_dir: Path | None = None
    log_level: str = "WARNING"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``CAPTURE__FORMULA_MARKER``, ``CAPTURE__DEDUP_WINDOW``, ``CLI__LOG_DIR``.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    capture: CaptureConfig = CaptureConfig()
    cli: CliConfig = CliConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
