#!/usr/bin/env python3
"""
Console interativo para o cadastro de clientes.

Uso:
  python -m cadastro.console [--backend json|sql] [--data-file dados/clientes.json] [--database-url URL]

Nos prompts de atualizacao, deixe vazio para manter o valor atual ou
digite "-" para apagar um campo opcional.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Callable, Optional, Sequence

from cadastro.core.config import BACKENDS, get_settings
from cadastro.core.logging import configure_logging
from cadastro.domain.clients import ClientRecord
from cadastro.domain.errors import ClientError, StoreUnavailableError
from cadastro.repositories import ClientStore, JSONClientStore, SQLClientStore, build_store
from cadastro.services.client_service import ClientService

logger = logging.getLogger(__name__)

CLEAR = "-"

MENU = """
=== CADASTRO DE CLIENTES ({backend}) ===
1 - Adicionar cliente
2 - Listar clientes
3 - Buscar cliente (CPF ou ID)
4 - Buscar por nome
5 - Buscar por cidade
6 - Atualizar cliente
7 - Desativar cliente
8 - Remover cliente permanentemente
9 - Reativar cliente
10 - Estatisticas
11 - Remover inativos antigos
12 - Importar clientes de arquivo JSON
13 - Remover todos os clientes
0 - Sair"""


def _fmt_date(value) -> str:
    return value.strftime("%d/%m/%Y %H:%M") if value else "-"


def format_client(record: ClientRecord) -> str:
    lines = [
        f"ID: {record.id}",
        f"Nome: {record.name}",
        f"CPF: {record.tax_id}",
        f"Email: {record.email or 'Nao informado'}",
        f"Telefone: {record.phone or 'Nao informado'}",
    ]
    if record.address and record.address.city:
        lines.append(f"Cidade: {record.address.city}/{record.address.state or ''}")
    lines.append(f"Status: {'Ativo' if record.active else 'Inativo'}")
    lines.append(f"Cadastrado: {_fmt_date(record.registered_at)}")
    if record.updated_at:
        lines.append(f"Atualizado: {_fmt_date(record.updated_at)}")
    if record.deactivated_at:
        lines.append(f"Desativado: {_fmt_date(record.deactivated_at)}")
    return "\n".join(lines)


class Console:
    """Menu loop; every option calls one ClientService operation."""

    def __init__(self, service: ClientService, ask: Callable[[str], str] = input, retention_days: int = 30) -> None:
        self.service = service
        self.ask = ask
        self.retention_days = retention_days
        self.actions = {
            "1": self.add_client,
            "2": self.list_clients,
            "3": self.show_client,
            "4": self.search_by_name,
            "5": self.search_by_city,
            "6": self.update_client,
            "7": self.deactivate_client,
            "8": self.delete_client,
            "9": self.reactivate_client,
            "10": self.show_stats,
            "11": self.purge_inactive,
            "12": self.import_clients,
            "13": self.remove_all_clients,
        }

    def run(self) -> None:
        while True:
            print(MENU.format(backend=self.service.store.backend))
            try:
                option = self.ask("\n>>> Escolha uma opcao: ").strip()
            except EOFError:
                break
            if option == "0":
                print("Saindo do sistema...")
                break
            action = self.actions.get(option)
            if not action:
                print("Opcao invalida! Tente novamente.")
                continue
            try:
                action()
            except ClientError as exc:
                print(f"ERRO: {exc.message}")
            except EOFError:
                break

    # -------------------------- helpers --------------------------
    def _confirm(self, question: str) -> bool:
        return self.ask(f"{question} (s/N): ").strip().lower() in {"s", "sim"}

    def _print_list(self, records: list[ClientRecord]) -> None:
        if not records:
            print("Nenhum cliente encontrado.")
            return
        for index, record in enumerate(records, start=1):
            print(f"\n{index}. {record.name}")
            print(format_client(record))
        print(f"\nTotal: {len(records)}")

    def _backup(self) -> None:
        store = self.service.store
        if isinstance(store, JSONClientStore):
            path = store.backup()
            if path:
                print(f"Backup criado: {path}")

    # -------------------------- actions --------------------------
    def add_client(self) -> None:
        name = self.ask("Nome: ")
        tax_id = self.ask("CPF (XXX.XXX.XXX-XX): ")
        email = self.ask("Email (opcional): ")
        phone = self.ask("Telefone (opcional): ")
        city = self.ask("Cidade (opcional): ").strip()
        state = self.ask("UF (opcional): ").strip()
        address = {"city": city, "state": state} if (city or state) else None
        record = self.service.create(name, tax_id, email=email, phone=phone, address=address)
        print("Cliente adicionado com sucesso:")
        print(format_client(record))

    def list_clients(self) -> None:
        choice = self.ask("Filtrar (t=todos, a=ativos, i=inativos) [t]: ").strip().lower()
        active = {"a": True, "i": False}.get(choice)
        raw = self.ask("Limite (vazio = todos): ").strip()
        limit = int(raw) if raw.isdigit() else None
        self._print_list(self.service.list_clients(active=active, sort_by_name=True, limit=limit))

    def show_client(self) -> None:
        record = self.service.find(self.ask("CPF ou ID: "))
        print(format_client(record))

    def search_by_name(self) -> None:
        self._print_list(self.service.find_by_name(self.ask("Nome (ou parte): "), sort_by_name=True))

    def search_by_city(self) -> None:
        self._print_list(self.service.find_by_city(self.ask("Cidade: ")))

    def update_client(self) -> None:
        record = self.service.find(self.ask("CPF ou ID do cliente: "))
        print(format_client(record))
        print(f"\nDigite os novos dados (vazio mantem, '{CLEAR}' apaga campos opcionais):")
        patch = {}
        for key, label in (("name", "Nome"), ("tax_id", "CPF"), ("email", "Email"), ("phone", "Telefone")):
            value = self.ask(f"Novo {label}: ").strip()
            if value:
                patch[key] = "" if value == CLEAR else value
        city = self.ask("Nova cidade: ").strip()
        if city:
            patch["address"] = "" if city == CLEAR else {"city": city}
        if not patch:
            print("Nenhuma alteracao realizada.")
            return
        updated = self.service.update(record.id, patch)
        print("Cliente atualizado:")
        print(format_client(updated))

    def deactivate_client(self) -> None:
        identifier = self.ask("CPF ou ID do cliente: ")
        result = self.service.remove(identifier, hard=False)
        print("Cliente desativado:")
        print(format_client(result.record))

    def delete_client(self) -> None:
        identifier = self.ask("CPF ou ID do cliente: ")
        record = self.service.find(identifier)
        print(format_client(record))
        if not self._confirm("ATENCAO: remocao permanente. Tem certeza?"):
            print("Operacao cancelada.")
            return
        self._backup()
        result = self.service.remove(record.id, hard=True)
        print(f"Cliente removido: {result.record.name}")

    def reactivate_client(self) -> None:
        record = self.service.reactivate(self.ask("CPF ou ID do cliente: "))
        print("Cliente reativado:")
        print(format_client(record))

    def show_stats(self) -> None:
        stats = self.service.statistics()
        print(f"Total de clientes: {stats.total}")
        print(f"Clientes ativos: {stats.active}")
        print(f"Clientes inativos: {stats.inactive}")
        print(f"Com email: {stats.with_email}")
        print(f"Com telefone: {stats.with_phone}")
        if stats.latest:
            print(f"Cadastro mais recente: {stats.latest.name} ({_fmt_date(stats.latest.registered_at)})")

    def purge_inactive(self) -> None:
        raw = self.ask(f"Remover inativos ha quantos dias? (padrao: {self.retention_days}): ").strip()
        days = int(raw) if raw.isdigit() else self.retention_days
        if not self._confirm(f"Remover permanentemente inativos ha mais de {days} dias?"):
            print("Operacao cancelada.")
            return
        self._backup()
        removed = self.service.purge_inactive(days)
        print(f"{len(removed)} cliente(s) removido(s).")

    def import_clients(self) -> None:
        path = self.ask("Arquivo JSON com a lista de clientes: ").strip()
        try:
            with open(path, "r", encoding="utf-8") as fh:
                items = json.load(fh)
        except (OSError, ValueError) as exc:
            print(f"ERRO: nao foi possivel ler {path}: {exc}")
            return
        result = self.service.create_many(items)
        for failure in result.failed:
            print(f"Cliente {failure.index + 1}: {failure.error.message}")
        print(f"{len(result.created)} cliente(s) adicionado(s) com sucesso")
        if result.failed:
            print(f"{len(result.failed)} cliente(s) com erro")

    def remove_all_clients(self) -> None:
        confirmed = self._confirm("ATENCAO: remover TODOS os clientes permanentemente?")
        if not confirmed:
            print("Operacao cancelada.")
            return
        self._backup()
        removed = self.service.remove_all(confirm=confirmed)
        print(f"Total removido: {len(removed)} cliente(s)")


def open_store(args: argparse.Namespace) -> ClientStore:
    settings = get_settings()
    overrides = {}
    if args.backend:
        overrides["storage_backend"] = args.backend
    if args.data_file:
        overrides["data_file"] = args.data_file
    if args.database_url:
        overrides["database_url"] = args.database_url
    store = build_store(replace(settings, **overrides))
    if isinstance(store, SQLClientStore):
        store.create_schema()
    store.ping()
    return store


def main(argv: Optional[Sequence[str]] = None, ask: Callable[[str], str] = input) -> int:
    ap = argparse.ArgumentParser(description="Cadastro de clientes por CPF")
    ap.add_argument("--backend", choices=BACKENDS, help="Armazenamento (default: STORAGE_BACKEND)")
    ap.add_argument("--data-file", help="Arquivo JSON de clientes")
    ap.add_argument("--database-url", help="URL SQLAlchemy do banco")
    ap.add_argument("--log-level", default=None, help="Nivel de log (default: LOG_LEVEL)")
    args = ap.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, json_logs=settings.log_json)
    try:
        store = open_store(args)
    except (StoreUnavailableError, RuntimeError) as exc:
        logger.error("Falha ao iniciar o armazenamento: %s", exc)
        sys.stderr.write(f"Erro: {exc}\n")
        return 1

    Console(ClientService(store), ask=ask, retention_days=settings.inactive_retention_days).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
