"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from cadastro.core.config import get_settings

Base = declarative_base()


def build_engine(url: str) -> Engine:
    url = (url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    try:
        return create_engine(url, future=True, pool_pre_ping=True)
    except (ArgumentError, ImportError) as exc:
        raise RuntimeError(f"Invalid DATABASE_URL or missing driver: {exc}") from exc


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@lru_cache
def get_engine() -> Engine:
    return build_engine(get_settings().database_url)


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    return build_sessionmaker(get_engine())


@contextmanager
def get_session(factory: Optional[sessionmaker] = None) -> Session:
    session: Session = (factory or _get_sessionmaker())()
    try:
        yield session
    finally:
        session.close()
