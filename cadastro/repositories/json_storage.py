"""
JSON-file persistence adapter.

The file holds an ordered list of client objects (4-space indent, ``null``
for absent optional values). Every mutation is a single load/mutate/write
cycle; the new content is written to a temporary file in the same
directory and moved over the old one with ``os.replace``, so a crash never
leaves a truncated file behind.

Ids come from a monotonic sequence kept in ``<file>.seq`` so that an id is
not handed out again after a hard delete.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from cadastro.core.config import get_settings
from cadastro.core.utils import utcnow
from cadastro.domain.clients import ClientRecord
from cadastro.domain.errors import (
    ClientNotFoundError,
    DuplicateTaxIdError,
    StoreUnavailableError,
)
from cadastro.repositories.base import ClientStore

logger = logging.getLogger(__name__)

JSON_INDENT = 4


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class JSONClientStore(ClientStore):
    """Client store backed by a single JSON file."""

    backend = "json"

    def __init__(self, data_file: str | Path | None = None, backup_dir: str | Path | None = None) -> None:
        settings = get_settings()
        self.data_file = Path(data_file or settings.data_file)
        self.backup_dir = Path(backup_dir or settings.backup_dir)
        self.seq_file = self.data_file.with_name(self.data_file.name + ".seq")

    # -------------------------- raw file access --------------------------
    def load(self) -> list[dict]:
        if not self.data_file.exists():
            return []
        try:
            with self.data_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Falha ao ler %s: %s", self.data_file, exc)
            raise StoreUnavailableError(f"Nao foi possivel ler {self.data_file}") from exc
        if not isinstance(data, list):
            raise StoreUnavailableError(f"Formato inesperado em {self.data_file}: esperado uma lista")
        return data

    def save(self, items: list[dict]) -> None:
        text = json.dumps(items, ensure_ascii=False, indent=JSON_INDENT)
        try:
            _atomic_write(self.data_file, text + "\n")
        except OSError as exc:
            logger.error("Falha ao gravar %s: %s", self.data_file, exc)
            raise StoreUnavailableError(f"Nao foi possivel gravar {self.data_file}") from exc

    def _read_sequence(self) -> int:
        try:
            return int(self.seq_file.read_text(encoding="utf-8").strip() or 0)
        except FileNotFoundError:
            return 0
        except ValueError:
            logger.warning("Sequencia invalida em %s; recalculando pelos ids", self.seq_file)
            return 0
        except OSError as exc:
            raise StoreUnavailableError(f"Nao foi possivel ler {self.seq_file}") from exc

    def _next_id(self, records: list[ClientRecord]) -> int:
        highest = max((r.id or 0 for r in records), default=0)
        next_id = max(self._read_sequence(), highest) + 1
        try:
            _atomic_write(self.seq_file, f"{next_id}\n")
        except OSError as exc:
            raise StoreUnavailableError(f"Nao foi possivel gravar {self.seq_file}") from exc
        return next_id

    def _write(self, records: list[ClientRecord]) -> None:
        self.save([record.to_dict() for record in records])

    @staticmethod
    def _index_of(records: list[ClientRecord], key: int) -> int:
        for index, record in enumerate(records):
            if record.id == key:
                return index
        raise ClientNotFoundError(f"Cliente {key} nao encontrado")

    @staticmethod
    def _ensure_unique(records: list[ClientRecord], tax_id: str, skip_id: Optional[int] = None) -> None:
        for record in records:
            if record.tax_id == tax_id and record.id != skip_id:
                raise DuplicateTaxIdError(tax_id)

    # -------------------------- store capability --------------------------
    def find_all(self) -> list[ClientRecord]:
        return [ClientRecord.from_dict(item) for item in self.load()]

    def insert(self, record: ClientRecord) -> ClientRecord:
        records = self.find_all()
        self._ensure_unique(records, record.tax_id)
        created = record.copy(id=self._next_id(records))
        records.append(created)
        self._write(records)
        return created

    def replace(self, key: int, record: ClientRecord) -> ClientRecord:
        records = self.find_all()
        index = self._index_of(records, key)
        self._ensure_unique(records, record.tax_id, skip_id=key)
        stored = record.copy(id=key)
        records[index] = stored
        self._write(records)
        return stored

    def delete(self, key: int) -> ClientRecord:
        records = self.find_all()
        removed = records.pop(self._index_of(records, key))
        self._write(records)
        return removed

    # -------------------------- backups --------------------------
    def backup(self) -> Optional[Path]:
        """Copy the data file to ``backup_dir`` with a timestamp suffix."""
        if not self.data_file.exists():
            return None
        stamp = utcnow().strftime("%Y%m%dT%H%M%S%f")
        target = self.backup_dir / f"{self.data_file.stem}-backup-{stamp}.json"
        suffix = 1
        while target.exists():
            target = self.backup_dir / f"{self.data_file.stem}-backup-{stamp}-{suffix}.json"
            suffix += 1
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.data_file, target)
        except OSError as exc:
            raise StoreUnavailableError(f"Nao foi possivel criar backup em {self.backup_dir}") from exc
        logger.info("Backup criado: %s", target)
        return target

    def list_backups(self) -> list[Path]:
        """Backups of this data file, newest first."""
        if not self.backup_dir.exists():
            return []
        pattern = f"{self.data_file.stem}-backup-*.json"
        return sorted(self.backup_dir.glob(pattern), key=lambda p: p.name, reverse=True)
