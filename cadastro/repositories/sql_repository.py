"""Client store backed by SQLAlchemy (unique index on the canonical CPF)."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cadastro.core.utils import as_utc
from cadastro.db.create_tables import create_all
from cadastro.db.models import ClientDocument
from cadastro.db.session import build_engine, build_sessionmaker, get_engine, get_session
from cadastro.domain.clients import ClientRecord, clean_address
from cadastro.domain.errors import (
    ClientNotFoundError,
    DuplicateTaxIdError,
    StoreUnavailableError,
)
from cadastro.repositories.base import ClientStore

logger = logging.getLogger(__name__)


def _to_record(entity: ClientDocument) -> ClientRecord:
    return ClientRecord(
        id=entity.id,
        name=entity.name,
        tax_id=entity.tax_id,
        email=entity.email,
        phone=entity.phone,
        address=clean_address(entity.address),
        active=bool(entity.active),
        registered_at=as_utc(entity.registered_at),
        updated_at=as_utc(entity.updated_at),
        deactivated_at=as_utc(entity.deactivated_at),
    )


def _apply(entity: ClientDocument, record: ClientRecord) -> None:
    entity.name = record.name
    entity.tax_id = record.tax_id
    entity.email = record.email
    entity.phone = record.phone
    entity.address = record.address.to_dict() if record.address else None
    entity.active = record.active
    entity.updated_at = record.updated_at
    entity.deactivated_at = record.deactivated_at


class SQLClientStore(ClientStore):
    """CRUD helpers wrapping the SQLAlchemy session."""

    backend = "sql"

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self._engine = engine
        self._factory = build_sessionmaker(engine) if engine is not None else None

    @classmethod
    def from_url(cls, url: str) -> "SQLClientStore":
        return cls(build_engine(url))

    @property
    def engine(self) -> Engine:
        return self._engine if self._engine is not None else get_engine()

    def create_schema(self) -> None:
        with self._guard():
            create_all(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._guard():
            with get_session(self._factory) as session:
                yield session

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Falha no banco de dados: %s", exc)
            raise StoreUnavailableError("Banco de dados indisponivel") from exc

    def _commit(self, session: Session, record: ClientRecord) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if "tax_id" in str(exc.orig).lower():
                raise DuplicateTaxIdError(record.tax_id) from exc
            raise

    # -------------------------- reads --------------------------
    def find_all(self) -> list[ClientRecord]:
        with self._session() as session:
            stmt = select(ClientDocument).order_by(ClientDocument.id)
            return [_to_record(e) for e in session.execute(stmt).scalars().all()]

    def find_by_tax_id(self, tax_id: str) -> Optional[ClientRecord]:
        with self._session() as session:
            stmt = select(ClientDocument).where(ClientDocument.tax_id == tax_id)
            entity = session.execute(stmt).scalar_one_or_none()
            return _to_record(entity) if entity else None

    def find_by_id(self, key: int) -> Optional[ClientRecord]:
        with self._session() as session:
            entity = session.get(ClientDocument, key)
            return _to_record(entity) if entity else None

    # -------------------------- writes --------------------------
    def insert(self, record: ClientRecord) -> ClientRecord:
        entity = ClientDocument()
        _apply(entity, record)
        if record.registered_at is not None:
            entity.registered_at = record.registered_at
        with self._session() as session:
            session.add(entity)
            self._commit(session, record)
            session.refresh(entity)
            return _to_record(entity)

    def replace(self, key: int, record: ClientRecord) -> ClientRecord:
        with self._session() as session:
            entity = session.get(ClientDocument, key)
            if not entity:
                raise ClientNotFoundError(f"Cliente {key} nao encontrado")
            _apply(entity, record)
            self._commit(session, record)
            session.refresh(entity)
            return _to_record(entity)

    def delete(self, key: int) -> ClientRecord:
        with self._session() as session:
            entity = session.get(ClientDocument, key)
            if not entity:
                raise ClientNotFoundError(f"Cliente {key} nao encontrado")
            snapshot = _to_record(entity)
            session.delete(entity)
            session.commit()
            return snapshot

    def ping(self) -> None:
        with self._session() as session:
            session.execute(text("SELECT 1"))
