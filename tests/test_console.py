from __future__ import annotations

import json

from cadastro.console import main

ANA = "123.456.789-09"


def _scripted(*answers):
    it = iter(answers)

    def ask(prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return ask


def test_console_create_update_and_soft_delete(settings_env, capsys):
    data_file = settings_env / "clientes.json"
    ask = _scripted(
        "1", "Ana Costa", "12345678909", "ana@example.com", "", "Recife", "PE",
        "6", ANA, "", "", "-", "81 9999-0000", "",
        "7", ANA,
        "0",
    )
    assert main(["--backend", "json", "--data-file", str(data_file)], ask=ask) == 0

    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert len(stored) == 1
    assert stored[0]["tax_id"] == ANA
    assert stored[0]["email"] is None
    assert stored[0]["phone"] == "81 9999-0000"
    assert stored[0]["address"]["city"] == "Recife"
    assert stored[0]["active"] is False
    assert "Cliente desativado" in capsys.readouterr().out


def test_console_reports_validation_errors_and_keeps_running(settings_env, capsys):
    ask = _scripted("1", "Ana Costa", "555.666.777.88", "", "", "", "", "0")
    assert main(["--data-file", str(settings_env / "clientes.json")], ask=ask) == 0
    out = capsys.readouterr().out
    assert "ERRO: CPF invalido" in out
    assert "Saindo do sistema" in out


def test_console_hard_delete_creates_backup(settings_env):
    data_file = settings_env / "clientes.json"
    ask = _scripted(
        "1", "Ana Costa", ANA, "", "", "", "",
        "8", ANA, "s",
        "0",
    )
    assert main(["--data-file", str(data_file)], ask=ask) == 0
    assert json.loads(data_file.read_text(encoding="utf-8")) == []
    backups = list((settings_env / "backup").glob("clientes-backup-*.json"))
    assert len(backups) == 1
    assert json.loads(backups[0].read_text(encoding="utf-8"))[0]["tax_id"] == ANA


def test_console_exits_with_1_when_database_is_unreachable(settings_env, capsys):
    url = f"sqlite:///{settings_env / 'nao' / 'existe' / 'x.db'}"
    code = main(["--backend", "sql", "--database-url", url], ask=_scripted("0"))
    assert code == 1
    assert "Erro:" in capsys.readouterr().err


def test_console_exits_with_1_without_database_url(settings_env):
    assert main(["--backend", "sql"], ask=_scripted("0")) == 1


def test_console_stops_on_end_of_input(settings_env):
    assert main([], ask=_scripted()) == 0


def test_console_imports_clients_from_file(settings_env, capsys):
    data_file = settings_env / "clientes.json"
    batch = settings_env / "lote.json"
    batch.write_text(
        json.dumps([
            {"name": "Ana Costa", "tax_id": ANA},
            {"name": "Pedro", "tax_id": "111.222.333-44"},
        ]),
        encoding="utf-8",
    )
    ask = _scripted("12", str(batch), "0")
    assert main(["--data-file", str(data_file)], ask=ask) == 0

    out = capsys.readouterr().out
    assert "1 cliente(s) adicionado(s) com sucesso" in out
    assert "1 cliente(s) com erro" in out
    assert [c["tax_id"] for c in json.loads(data_file.read_text(encoding="utf-8"))] == [ANA]


def test_console_remove_all_asks_and_backs_up(settings_env, capsys):
    data_file = settings_env / "clientes.json"
    ask = _scripted(
        "1", "Ana Costa", ANA, "", "", "", "",
        "13", "n",
        "13", "s",
        "0",
    )
    assert main(["--data-file", str(data_file)], ask=ask) == 0

    out = capsys.readouterr().out
    assert "Operacao cancelada." in out
    assert "Total removido: 1 cliente(s)" in out
    assert json.loads(data_file.read_text(encoding="utf-8")) == []
    backups = list((settings_env / "backup").glob("clientes-backup-*.json"))
    assert len(backups) == 1
