"""
Persistence adapters.

Two backends implement the same ClientStore capability: a JSON file
(JSONClientStore) and a SQL database (SQLClientStore). Services depend on
ClientStore only; ``build_store`` picks the backend from the settings.
"""

from __future__ import annotations

from typing import Optional

from cadastro.core.config import Settings, get_settings
from cadastro.repositories.base import ClientStore
from cadastro.repositories.json_storage import JSONClientStore
from cadastro.repositories.sql_repository import SQLClientStore


def build_store(settings: Optional[Settings] = None) -> ClientStore:
    settings = settings or get_settings()
    if settings.storage_backend == "sql":
        return SQLClientStore.from_url(settings.database_url)
    return JSONClientStore(settings.data_file, settings.backup_dir)


__all__ = ["ClientStore", "JSONClientStore", "SQLClientStore", "build_store"]
