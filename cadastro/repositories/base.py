"""
Store capability shared by every persistence backend.

The service layer only talks to this interface. Backends must:
- assign ``id`` on insert and never reuse it;
- raise DuplicateTaxIdError when a CPF is already held by another record;
- raise ClientNotFoundError when replace/delete target a missing key;
- raise StoreUnavailableError on I/O or connection failures.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from cadastro.domain.clients import ClientRecord

Predicate = Callable[[ClientRecord], bool]


class ClientStore(ABC):
    """Find/insert/replace/delete over a collection of client records."""

    backend = "abstract"

    @abstractmethod
    def find_all(self) -> list[ClientRecord]:
        """Every record, in the store's natural order."""

    def find_one(self, predicate: Predicate) -> Optional[ClientRecord]:
        for record in self.find_all():
            if predicate(record):
                return record
        return None

    def find_by_tax_id(self, tax_id: str) -> Optional[ClientRecord]:
        return self.find_one(lambda record: record.tax_id == tax_id)

    def find_by_id(self, key: int) -> Optional[ClientRecord]:
        return self.find_one(lambda record: record.id == key)

    @abstractmethod
    def insert(self, record: ClientRecord) -> ClientRecord:
        """Persist a new record and return it with its assigned id."""

    @abstractmethod
    def replace(self, key: int, record: ClientRecord) -> ClientRecord:
        """Overwrite the record stored under ``key``."""

    @abstractmethod
    def delete(self, key: int) -> ClientRecord:
        """Remove the record stored under ``key`` and return its last state."""

    def ping(self) -> None:
        """Raise StoreUnavailableError when the backend cannot be reached."""
        self.find_all()
