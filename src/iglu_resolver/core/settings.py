"""Centralized resolver configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod

Only process-level knobs live here (cache TTL, default HTTP timeouts, where
the resolver configuration document is). The list of repositories itself is
read from that document, see :meth:`iglu_resolver.resolver.Resolver.from_file`.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed resolver configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `IGLU_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    cache_ttl : int
        Seconds a resolved schema stays in the cache; `0` disables caching.
        Maps from `IGLU_CACHE_TTL`.
    resolver_config : Optional[Path]
        Path to a self-describing resolver configuration JSON. Maps from
        `IGLU_RESOLVER_CONFIG`.
    http_connect_timeout / http_read_timeout : float
        Defaults for HTTP repositories whose descriptor has no timeouts.
    """

    environment: EnvName = Field(default="dev", alias="IGLU_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    cache_ttl: int = Field(default=600, ge=0, alias="IGLU_CACHE_TTL")
    resolver_config: Path | None = Field(default=None, alias="IGLU_RESOLVER_CONFIG")
    http_connect_timeout: float = Field(default=1.0, gt=0, alias="IGLU_HTTP_CONNECT_TIMEOUT")
    http_read_timeout: float = Field(default=4.0, gt=0, alias="IGLU_HTTP_READ_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("IGLU_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "iglu_resolver") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
