"""
Application configuration and settings.

Centralises all external configuration (env-vars / .env) and
version discovery.  The job queue singleton lives in
``app.api.deps``.
"""

from __future__ import annotations

import importlib.metadata
import json
import logging
from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from app.core.constants import BITS_PER_CHARACTER, FIRST_CHARACTER_BITS

logger = logging.getLogger(__name__)


# ── Package version (single source of truth from pyproject.toml) ────────


def get_version() -> str:
    """Return the installed package version.

    Falls back to ``"0.0.0-dev"`` when the package metadata
    is not available (e.g. when running from a source checkout).

    Returns:
        Semantic version string.
    """
    try:
        return importlib.metadata.version("vanity-work-server")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


# ── Settings ────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General
    APP_NAME: str = "Vanity Work Server"
    API_V1_STR: str = "/v1"
    ROOT_PATH: str = ""
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # ── Advertised capabilities (``/info``) ─────────────────────────
    WORKER_NAME: str = "miner name"
    WORKER_DEMAND: str = "none"

    # ── Admission control ───────────────────────────────────────────
    MAX_BITS: int | None = None
    MAX_CHARACTERS: int = 6

    # ── Computation runner ──────────────────────────────────────────
    NANO_VANITY_COMMAND: Annotated[list[str], NoDecode] = ["nano-vanity"]
    RUNNER_TIMEOUT: float | None = None  # seconds, None = wait forever

    # ── Job store ───────────────────────────────────────────────────
    JOB_STORE_MAX_ENTRIES: int | None = None  # None = never evict

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: str | list[str]) -> list[str]:
        """Accept a JSON-encoded string or a list."""
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("NANO_VANITY_COMMAND", mode="before")
    @classmethod
    def _parse_command(cls, v: str | list[str]) -> list[str]:
        """Accept a JSON list, a whitespace-separated string or a list."""
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return v.split()
        return v

    @field_validator("NANO_VANITY_COMMAND")
    @classmethod
    def _require_command(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("NANO_VANITY_COMMAND must name an executable")
        return v

    @property
    def max_bits(self) -> int:
        """Largest prefix bit cost accepted for mining.

        ``MAX_BITS`` wins when set; otherwise the budget is derived
        from ``MAX_CHARACTERS`` fixed characters after a fixed first
        character.
        """
        if self.MAX_BITS is not None:
            return self.MAX_BITS
        return FIRST_CHARACTER_BITS + self.MAX_CHARACTERS * BITS_PER_CHARACTER


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Using ``lru_cache`` ensures the .env file is read exactly
    once.  Override in tests via ``app.dependency_overrides``.
    """
    return Settings()
