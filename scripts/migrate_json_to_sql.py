"""One-off migration script: clientes.json -> SQL database.

Uso:
  python scripts/migrate_json_to_sql.py [--data-file dados/clientes.json] [--database-url URL]

Records are copied as stored (timestamps and active flag included). Records
whose CPF already exists in the database are skipped and reported. The SQL
backend assigns new ids.
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Garantir que o pacote cadastro seja importável quando rodado diretamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cadastro.core.config import get_settings
from cadastro.domain.errors import DuplicateTaxIdError
from cadastro.repositories import JSONClientStore, SQLClientStore


def migrate(source: JSONClientStore, target: SQLClientStore) -> tuple[int, list[str]]:
    target.create_schema()
    copied = 0
    skipped: list[str] = []
    for record in source.find_all():
        try:
            target.insert(record.copy(id=None))
        except DuplicateTaxIdError:
            skipped.append(record.tax_id)
            continue
        copied += 1
    return copied, skipped


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Migrar clientes do JSON para o banco SQL")
    ap.add_argument("--data-file", default=settings.data_file, help="Arquivo JSON de origem")
    ap.add_argument("--database-url", default=settings.database_url, help="URL SQLAlchemy de destino")
    args = ap.parse_args()

    source = JSONClientStore(args.data_file)
    if not source.data_file.exists():
        raise SystemExit(f"Arquivo nao encontrado: {source.data_file}")
    copied, skipped = migrate(source, SQLClientStore.from_url(args.database_url))
    print(f"{copied} cliente(s) migrado(s).")
    for tax_id in skipped:
        print(f"  ignorado (CPF ja existe no banco): {tax_id}")


if __name__ == "__main__":
    main()
