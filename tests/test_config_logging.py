from __future__ import annotations

import json
import logging

from cadastro.core import config as core_config
from cadastro.core.logging import _json_formatter


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "SQL")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("INACTIVE_RETENTION_DAYS", "abc")
    monkeypatch.setenv("LOG_JSON", "yes")
    core_config.get_settings.cache_clear()
    try:
        settings = core_config.get_settings()
        assert settings.storage_backend == "sql"
        assert settings.database_url == "sqlite:///x.db"
        assert settings.inactive_retention_days == 30
        assert settings.log_json is True
    finally:
        core_config.get_settings.cache_clear()


def test_unknown_backend_falls_back_to_json(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "mongo")
    core_config.get_settings.cache_clear()
    try:
        assert core_config.get_settings().storage_backend == "json"
    finally:
        core_config.get_settings.cache_clear()


def test_json_formatter_promotes_extra_fields():
    record = logging.LogRecord(
        name="cadastro.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Cliente criado",
        args=(),
        exc_info=None,
    )
    record.client_id = 7
    record.backend = "json"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "cadastro.test"
    assert payload["message"] == "Cliente criado"
    assert payload["client_id"] == 7
    assert payload["backend"] == "json"
