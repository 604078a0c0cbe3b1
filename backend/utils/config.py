"""Application settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration.

    Tests derive variants with ``dataclasses.replace`` instead of mutating
    process environment.
    """

    app_name: str
    app_version: str
    database_path: Path
    database_timeout_seconds: float
    log_level: str
    gateway_token: str
    seed_floor_plan: bool
    max_bulk_seats: int
    max_bulk_dates: int
    default_long_term_holder: str
    api_base_url: str
    bootstrap_admin_user_ids: tuple[str, ...]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        app_name=os.environ.get("HOTDESK_APP_NAME", "Hot-Desk Reservation Service"),
        app_version=os.environ.get("HOTDESK_APP_VERSION", "1.0.0"),
        database_path=Path(os.environ.get("HOTDESK_DATABASE_PATH", "data/hotdesk.db")),
        database_timeout_seconds=_env_float("HOTDESK_DATABASE_TIMEOUT_SECONDS", 5.0),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        gateway_token=os.environ.get("GATEWAY_TOKEN", ""),
        seed_floor_plan=_env_bool("HOTDESK_SEED_FLOOR_PLAN", True),
        max_bulk_seats=_env_int("HOTDESK_MAX_BULK_SEATS", 50),
        max_bulk_dates=_env_int("HOTDESK_MAX_BULK_DATES", 31),
        default_long_term_holder=os.environ.get(
            "HOTDESK_DEFAULT_LONG_TERM_HOLDER", "Reserved Employee"
        ),
        api_base_url=os.environ.get("HOTDESK_API_BASE_URL", "http://127.0.0.1:8000"),
        bootstrap_admin_user_ids=tuple(
            item.strip()
            for item in os.environ.get("HOTDESK_BOOTSTRAP_ADMINS", "").split(",")
            if item.strip()
        ),
    )
