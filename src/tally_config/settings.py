"""Tally settings, read from the environment and an optional ``.env`` file.

The first existing file wins:

- ``$TALLY_ENV_FILE`` (relative paths resolve against the project root)
- ``config/.env.dev`` for local development
- ``config/.env`` for containers

Real environment variables always override the file.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SEASONAL_FACTOR_COUNT = 12

_ROOT_MARKERS = ("config", ".git")


def _project_root() -> Path:
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if any((candidate / marker).is_dir() for marker in _ROOT_MARKERS):
            return candidate
        if candidate == Path("/app"):
            return candidate
    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    return _project_root() / "config"


def _env_file() -> Path | None:
    candidates: list[Path] = []
    override = os.environ.get("TALLY_ENV_FILE")
    if override:
        path = Path(override)
        candidates.append(path if path.is_absolute() else _project_root() / path)
    candidates += [get_config_dir() / ".env.dev", get_config_dir() / ".env"]
    return next((path for path in candidates if path.exists()), None)


class Settings(BaseSettings):
    """Environment-backed configuration. Only ``POSTGRES_PASSWORD`` is required."""

    model_config = SettingsConfigDict(
        env_file=_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # No default: the app refuses to start without it
    postgres_password: SecretStr

    # Application
    app_name: str = "Tally"
    debug: bool = False

    # Database (POSTGRES_ prefix)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_db: str = "tally"

    # Where analytics rows are read from: the database directly or its
    # PostgREST (Supabase) HTTP interface
    data_source: Literal["postgres", "rest"] = "postgres"

    # PostgREST (REST_ prefix)
    rest_url: str = "http://localhost:54321"
    rest_api_key: SecretStr | None = None
    rest_timeout: float = 10.0

    # API (API_ prefix)
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_cors_origins: str = ""  # Empty = no CORS allowed (secure default)

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _validate_cors_origins(cls, v: Any) -> str:
        if isinstance(v, list):
            return ",".join(v)
        return str(v) if v else ""

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    # Analytics policy (ANALYTICS_ prefix). Defaults are tuning values
    # awaiting product confirmation, not derived constants.
    analytics_stable_threshold_pct: float = 5.0
    analytics_budget_warning_pct: float = 80.0
    analytics_budget_exceeded_pct: float = 100.0
    analytics_forecast_window_months: int = 6
    analytics_forecast_horizon_months: int = 6
    analytics_forecast_range_multiplier: float = 1.5
    analytics_seasonal_factors: str = ""  # 12 comma-separated values, Jan..Dec
    analytics_top_categories: int = 10

    @field_validator("analytics_seasonal_factors", mode="before")
    @classmethod
    def _validate_seasonal_factors(cls, v: Any) -> str:
        if isinstance(v, (list, tuple)):
            v = ",".join(str(item) for item in v)
        value = str(v).strip() if v else ""
        if value and len(value.split(",")) != SEASONAL_FACTOR_COUNT:
            msg = "analytics_seasonal_factors needs exactly 12 comma-separated values"
            raise ValueError(msg)
        for item in value.split(",") if value else []:
            float(item)  # raises ValueError for non-numeric entries
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """asyncpg URL assembled from the POSTGRES_* fields."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.api_cors_origins.split(",") if o.strip()]

    @property
    def seasonal_factors(self) -> list[float] | None:
        """Parsed seasonal factor override, or None to keep the defaults."""
        if not self.analytics_seasonal_factors:
            return None
        return [float(f) for f in self.analytics_seasonal_factors.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()  # type: ignore[call-arg]


def clear_settings_cache() -> None:
    get_settings.cache_clear()
