"""
Fixtures shared by the test modules.

Provides:
- isolated settings pointing at a temporary data directory
- a JSON store and a SQLite-backed SQL store
- ``store``/``service`` fixtures parametrized over both backends
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Garante que o pacote cadastro seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cadastro.core import config as core_config  # noqa: E402
from cadastro.db import session as db_session  # noqa: E402
from cadastro.repositories import JSONClientStore, SQLClientStore  # noqa: E402
from cadastro.services.client_service import ClientService  # noqa: E402


@pytest.fixture()
def settings_env(tmp_path, monkeypatch):
    """Aponta DATA_FILE/BACKUP_DIR para um diretório temporário e limpa o cache de settings."""
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "clientes.json"))
    monkeypatch.setenv("BACKUP_DIR", str(tmp_path / "backup"))
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    core_config.get_settings.cache_clear()
    yield tmp_path
    core_config.get_settings.cache_clear()


@pytest.fixture()
def json_store(tmp_path):
    return JSONClientStore(tmp_path / "clientes.json", tmp_path / "backup")


@pytest.fixture()
def sql_store(tmp_path):
    """SQLite temporário; o engine é descartado no teardown para não deixar o arquivo bloqueado no Windows."""
    engine = db_session.build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    store = SQLClientStore(engine)
    store.create_schema()
    yield store
    engine.dispose()


@pytest.fixture(params=["json", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture()
def service(store):
    return ClientService(store)
