"""Deployment settings loaded from the environment."""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

from tierscope.core.config import (
    DEFAULT_FALLBACK_LIMIT,
    DEFAULT_ROW_CAP,
    TierQueryConfig,
)
from tierscope.core.errors import ConfigurationError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    db_path: str
    row_cap: int
    fallback_enabled: bool
    fallback_limit: int
    max_window_days: int

    @property
    def max_window(self) -> timedelta:
        return timedelta(days=self.max_window_days)

    def query_config(self) -> TierQueryConfig:
        """Gateway configuration with the default tier sources."""
        return TierQueryConfig(
            row_cap=self.row_cap,
            fallback_enabled=self.fallback_enabled,
            fallback_limit=self.fallback_limit,
        )


def get_settings() -> Settings:
    # Load the env file if present; real environment variables take precedence.
    env_file = os.getenv("TIERSCOPE_ENV_FILE", ".env")
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    max_window_days = _env_int("TIERSCOPE_MAX_WINDOW_DAYS", 30)
    if max_window_days <= 0:
        raise ConfigurationError("TIERSCOPE_MAX_WINDOW_DAYS must be positive")

    return Settings(
        db_path=os.getenv("TIERSCOPE_DB_PATH", "rollups.db"),
        row_cap=_env_int("TIERSCOPE_ROW_CAP", DEFAULT_ROW_CAP),
        fallback_enabled=_env_bool("TIERSCOPE_FALLBACK_ENABLED", True),
        fallback_limit=_env_int("TIERSCOPE_FALLBACK_LIMIT", DEFAULT_FALLBACK_LIMIT),
        max_window_days=max_window_days,
    )
