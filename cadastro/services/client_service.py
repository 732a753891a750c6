"""
Client registry use cases: create, update, soft/hard removal, reactivation
and lookups. Works the same on every ClientStore backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from cadastro.core.utils import as_utc, utcnow
from cadastro.domain import cpf
from cadastro.domain.clients import (
    PATCHABLE_FIELDS,
    ClientRecord,
    clean_address,
    clean_email,
    clean_name,
    clean_phone,
    clean_tax_id,
    require_name,
    require_tax_id,
)
from cadastro.domain.errors import (
    AlreadyActiveError,
    AlreadyInactiveError,
    ClientNotFoundError,
    ClientError,
    ClientValidationError,
    ConfirmationRequiredError,
    DuplicateTaxIdError,
    StoreUnavailableError,
    UnknownFieldError,
)
from cadastro.repositories import ClientStore, build_store

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class SoftDeleted:
    record: ClientRecord
    hard = False


@dataclass
class HardDeleted:
    record: ClientRecord
    hard = True


RemoveResult = Union[SoftDeleted, HardDeleted]


@dataclass
class BulkFailure:
    index: int
    error: ClientError


@dataclass
class BulkResult:
    created: list[ClientRecord]
    failed: list[BulkFailure]


@dataclass
class ClientStats:
    total: int
    active: int
    inactive: int
    with_email: int
    with_phone: int
    latest: Optional[ClientRecord]


class ClientService:
    """Validates client data and orchestrates a ClientStore."""

    def __init__(self, store: Optional[ClientStore] = None) -> None:
        self.store = store if store is not None else build_store()

    # -------------------------------------- helpers --------------------------------------
    def _now(self) -> datetime:
        return utcnow()

    def _resolve(self, identifier: Union[int, str]) -> ClientRecord:
        """Find a record by canonical CPF or by id."""
        if isinstance(identifier, int) and not isinstance(identifier, bool):
            record = self.store.find_by_id(identifier)
        else:
            value = str(identifier or "").strip()
            record = None
            digits = cpf.normalize(value)
            if len(digits) == cpf.CPF_LENGTH:
                record = self.store.find_by_tax_id(cpf.canonicalize(digits))
            elif value.isdigit():
                record = self.store.find_by_id(int(value))
        if record is None:
            raise ClientNotFoundError(f"Cliente nao encontrado: {identifier}")
        return record

    def _ensure_tax_id_free(self, tax_id: str, owner_id: Optional[int] = None) -> None:
        holder = self.store.find_by_tax_id(tax_id)
        if holder is not None and holder.id != owner_id:
            raise DuplicateTaxIdError(tax_id)

    # -------------------------------------- create --------------------------------------
    def create(
        self,
        name: Optional[str],
        tax_id: Optional[str],
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Any = None,
    ) -> ClientRecord:
        require_name(name)
        require_tax_id(tax_id)
        clean = clean_name(name)
        canonical = clean_tax_id(tax_id)
        self._ensure_tax_id_free(canonical)
        record = ClientRecord(
            name=clean,
            tax_id=canonical,
            email=clean_email(email),
            phone=clean_phone(phone),
            address=clean_address(address),
            active=True,
            registered_at=self._now(),
        )
        created = self.store.insert(record)
        logger.info("Cliente criado", extra={"client_id": created.id, "backend": self.store.backend})
        return created

    def create_many(self, items: Iterable[Any]) -> BulkResult:
        """
        Create each item on its own. Validation and duplicate errors are
        collected per item; the store becoming unavailable aborts the batch.
        """
        if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
            raise ClientValidationError("Lista de clientes deve ser uma lista")
        result = BulkResult(created=[], failed=[])
        for index, item in enumerate(items):
            try:
                if not isinstance(item, Mapping):
                    raise ClientValidationError("Cliente deve ser um objeto")
                unknown = set(item) - set(PATCHABLE_FIELDS)
                if unknown:
                    raise UnknownFieldError(unknown)
                result.created.append(self.create(**{key: item.get(key) for key in PATCHABLE_FIELDS}))
            except StoreUnavailableError:
                raise
            except ClientError as exc:
                result.failed.append(BulkFailure(index, exc))
        logger.info(
            "Cadastro em lote concluido",
            extra={"created_count": len(result.created), "failed_count": len(result.failed)},
        )
        return result

    # -------------------------------------- update --------------------------------------
    def update(self, identifier: Union[int, str], patch: Mapping[str, Any]) -> ClientRecord:
        """
        Apply a partial patch. Keys absent from ``patch`` keep their value;
        ``""``/``None`` clears optional fields. Every present field is validated
        before anything is written, so a failure leaves the record untouched.
        """
        current = self._resolve(identifier)
        unknown = set(patch) - set(PATCHABLE_FIELDS)
        if unknown:
            raise UnknownFieldError(unknown)
        if not patch:
            return current

        changes: dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = clean_name(patch["name"])
        if "tax_id" in patch:
            canonical = clean_tax_id(patch["tax_id"])
            self._ensure_tax_id_free(canonical, owner_id=current.id)
            changes["tax_id"] = canonical
        if "email" in patch:
            changes["email"] = clean_email(patch["email"])
        if "phone" in patch:
            changes["phone"] = clean_phone(patch["phone"])
        if "address" in patch:
            changes["address"] = clean_address(patch["address"], current.address)

        updated = current.copy(updated_at=self._now(), **changes)
        stored = self.store.replace(current.id, updated)
        logger.info("Cliente atualizado", extra={"client_id": stored.id, "fields": sorted(changes)})
        return stored

    # -------------------------------------- remove / reactivate --------------------------------------
    def remove(self, identifier: Union[int, str], hard: bool = False) -> RemoveResult:
        current = self._resolve(identifier)
        if hard:
            removed = self.store.delete(current.id)
            logger.info("Cliente removido permanentemente", extra={"client_id": removed.id})
            return HardDeleted(removed)
        if not current.active:
            raise AlreadyInactiveError(f"Cliente {current.tax_id} ja esta inativo")
        stored = self.store.replace(current.id, current.copy(active=False, deactivated_at=self._now()))
        logger.info("Cliente desativado", extra={"client_id": stored.id})
        return SoftDeleted(stored)

    def reactivate(self, identifier: Union[int, str]) -> ClientRecord:
        current = self._resolve(identifier)
        if current.active:
            raise AlreadyActiveError(f"Cliente {current.tax_id} ja esta ativo")
        stored = self.store.replace(
            current.id,
            current.copy(active=True, deactivated_at=None, updated_at=self._now()),
        )
        logger.info("Cliente reativado", extra={"client_id": stored.id})
        return stored

    def purge_inactive(self, older_than_days: int = 30) -> list[ClientRecord]:
        """Hard-delete inactive clients deactivated more than ``older_than_days`` ago."""
        cutoff = self._now() - timedelta(days=older_than_days)
        removed = []
        for record in self.store.find_all():
            deactivated = as_utc(record.deactivated_at)
            if record.active or deactivated is None or deactivated >= cutoff:
                continue
            removed.append(self.store.delete(record.id))
        if removed:
            logger.info("Clientes inativos removidos", extra={"count": len(removed), "days": older_than_days})
        return removed

    def remove_all(self, confirm: bool = False) -> list[ClientRecord]:
        """Hard-delete every record. Refuses to run unless ``confirm`` is true."""
        if not confirm:
            raise ConfirmationRequiredError("Operacao cancelada: confirmacao necessaria")
        removed = [self.store.delete(record.id) for record in self.store.find_all()]
        logger.warning("Todos os clientes removidos", extra={"count": len(removed), "backend": self.store.backend})
        return removed

    # -------------------------------------- lookups --------------------------------------
    def find_by_tax_id(self, raw: Optional[str]) -> ClientRecord:
        digits = cpf.normalize(raw)
        if len(digits) != cpf.CPF_LENGTH:
            raise ClientNotFoundError(f"Cliente nao encontrado: {raw}")
        record = self.store.find_by_tax_id(cpf.canonicalize(digits))
        if record is None:
            raise ClientNotFoundError(f"Cliente nao encontrado: {raw}")
        return record

    def find_by_id(self, key: Union[int, str]) -> ClientRecord:
        try:
            value = int(key)
        except (TypeError, ValueError):
            raise ClientNotFoundError(f"Cliente nao encontrado: {key}")
        record = self.store.find_by_id(value)
        if record is None:
            raise ClientNotFoundError(f"Cliente nao encontrado: {key}")
        return record

    def find(self, identifier: Union[int, str]) -> ClientRecord:
        """Lookup by CPF or id, whichever the identifier looks like."""
        return self._resolve(identifier)

    def find_by_name(self, text: Optional[str], sort_by_name: bool = False) -> list[ClientRecord]:
        needle = (text or "").strip().casefold()
        found = [r for r in self.store.find_all() if needle in r.name.casefold()]
        return _sorted_by_name(found) if sort_by_name else found

    def find_by_city(self, text: Optional[str]) -> list[ClientRecord]:
        needle = (text or "").strip().casefold()
        found = [
            r for r in self.store.find_all()
            if r.address and r.address.city and needle in r.address.city.casefold()
        ]
        return _sorted_by_name(found)

    def list_clients(
        self,
        active: Optional[bool] = None,
        sort_by_name: bool = False,
        limit: Optional[int] = None,
    ) -> list[ClientRecord]:
        """Records in store order (or by name); ``limit`` <= 0 or ``None`` means no limit."""
        records = self.store.find_all()
        if active is not None:
            records = [r for r in records if r.active == active]
        if sort_by_name:
            records = _sorted_by_name(records)
        return records[:limit] if limit and limit > 0 else records

    def statistics(self) -> ClientStats:
        records = self.store.find_all()
        active = sum(1 for r in records if r.active)
        latest = max(records, key=lambda r: (as_utc(r.registered_at) or _EPOCH, r.id or 0), default=None)
        return ClientStats(
            total=len(records),
            active=active,
            inactive=len(records) - active,
            with_email=sum(1 for r in records if r.email),
            with_phone=sum(1 for r in records if r.phone),
            latest=latest,
        )


def _sorted_by_name(records: list[ClientRecord]) -> list[ClientRecord]:
    return sorted(records, key=lambda r: r.name.casefold())
