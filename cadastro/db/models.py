"""SQLAlchemy model mirroring the JSON client records."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    JSON,
    func,
)

from .session import Base


class ClientDocument(Base):
    __tablename__ = "clients"
    # sqlite_autoincrement keeps SQLite from handing out the id of a deleted last row again
    __table_args__ = (
        Index("uq_clients_tax_id", "tax_id", unique=True),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    tax_id = Column(String(14), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address = Column(JSON, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    registered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    deactivated_at = Column(DateTime(timezone=True), nullable=True)
