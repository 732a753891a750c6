"""
Configuration helpers for the cadastro backend.

Settings are read once from environment variables and cached; tests call
``get_settings.cache_clear()`` after changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

BACKENDS = ("json", "sql")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_file: str
    backup_dir: str
    database_url: str
    log_level: str
    log_json: bool
    inactive_retention_days: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    backend = (os.getenv("STORAGE_BACKEND") or "json").strip().lower()
    if backend not in BACKENDS:
        backend = "json"

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=backend,
        data_file=os.getenv("DATA_FILE", os.path.join("data", "clientes.json")),
        backup_dir=os.getenv("BACKUP_DIR", os.path.join("data", "backup")),
        database_url=os.getenv("DATABASE_URL", ""),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_json=_bool(os.getenv("LOG_JSON"), False),
        inactive_retention_days=_int(os.getenv("INACTIVE_RETENTION_DAYS", "30"), 30),
    )
