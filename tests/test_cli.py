"""Smoke tests for the command line interface."""

import json

from jsonfile_db.cli import main


def _run(tmp_path, *argv):
    return main(["--root", str(tmp_path), *argv])


class TestCli:
    def test_create_insert_select(self, tmp_path, capsys):
        assert _run(tmp_path, "create-table", "users", "name:string", "age:integer") == 0
        assert _run(tmp_path, "insert", "users", "name=Alice", "age=30") == 0
        assert _run(tmp_path, "insert", "users", "name=Bob", "age=17") == 0
        capsys.readouterr()

        assert _run(tmp_path, "select", "users", "--where", "age>=18") == 0
        out = capsys.readouterr().out
        assert "Alice" in out
        assert "Bob" not in out

        assert _run(tmp_path, "select", "users", "--count") == 0
        assert capsys.readouterr().out.strip() == "2"

    def test_command_log_written(self, tmp_path):
        _run(tmp_path, "create-table", "users", "name:string")
        log = (tmp_path / "logs" / "commands.log").read_text(encoding="utf-8")
        assert "create_table" in log

    def test_no_log(self, tmp_path):
        _run(tmp_path, "--no-log", "create-table", "users", "name:string")
        assert not (tmp_path / "logs").exists()

    def test_domain_error_exit_code(self, tmp_path, capsys):
        assert _run(tmp_path, "select", "missing") == 1
        assert "Error:" in capsys.readouterr().err

    def test_delete_all_requires_yes(self, tmp_path, capsys):
        _run(tmp_path, "create-table", "users", "name:string")
        _run(tmp_path, "insert", "users", "name=Alice")
        assert _run(tmp_path, "delete", "users") == 1
        assert _run(tmp_path, "delete", "users", "--yes") == 0
        record_files = list((tmp_path / "db" / "users").iterdir())
        assert record_files == []

    def test_group_and_export(self, tmp_path, capsys):
        _run(tmp_path, "create-table", "orders", "status:string", "amount:number")
        _run(tmp_path, "insert", "orders", "status=A", "amount=10")
        _run(tmp_path, "insert", "orders", "status=A", "amount=5")
        capsys.readouterr()
        assert _run(tmp_path, "group", "orders", "status", "--count", "--agg", "amount:sum") == 0
        assert "15" in capsys.readouterr().out

        dump = tmp_path / "dump.json"
        assert _run(tmp_path, "export", str(dump)) == 0
        assert json.loads(dump.read_text(encoding="utf-8"))["tables"]["orders"]["control"]["records_count"] == 2
