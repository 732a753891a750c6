"""Database helpers (engine/session export)."""

from .session import Base, build_engine, get_engine, get_session

__all__ = ["Base", "build_engine", "get_engine", "get_session"]
