"""
Unit tests for dodvault/cli/

Coverage plan
─────────────
arg parsing   → 5 tests  (defaults, env overrides, show / save subcommands)
list command  → 2 tests  (empty store, populated store)
show command  → 3 tests  (found, unknown id, unencodable id)
save command  → 5 tests  (file, stdin, malformed, unencodable text,
                          crashed handler)
no response   → 2 tests  (list, show)
main()        → 1 test   (end-to-end save then list)
─────────────────────────────────────────────────────────────────
Total         = 18 tests
"""

import asyncio
import json
from io import StringIO

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _parse(args: list[str]):
    """Call the CLI argument parser and return the parsed namespace."""
    from dodvault.cli.main import build_parser
    parser = build_parser()
    return parser.parse_args(args)


@pytest.fixture
def store(tmp_path):
    """Fresh DocumentStore for CLI command tests."""
    from dodvault.store.db import DocumentStore
    return DocumentStore("cli_test", base_dir=str(tmp_path))


# ─────────────────────────────────────────────────────────────────────────────
# 1. Argument parsing
# ─────────────────────────────────────────────────────────────────────────────

class TestArgParsing:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DODVAULT_DB_DIR", raising=False)
        monkeypatch.delenv("DODVAULT_DB_NAME", raising=False)
        ns = _parse(["list"])
        assert ns.subcommand == "list"
        assert ns.db_dir == "~/.dodvault"
        assert ns.name == "doddb"
        assert ns.debug is False

    def test_environment_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("DODVAULT_DB_DIR", "/data/vault")
        monkeypatch.setenv("DODVAULT_DB_NAME", "party")
        ns = _parse(["list"])
        assert ns.db_dir == "/data/vault"
        assert ns.name == "party"

    def test_show_requires_id(self):
        with pytest.raises(SystemExit):
            _parse(["show"])

    def test_show_parses_id(self):
        ns = _parse(["show", "--id", "abc123"])
        assert ns.id == "abc123"

    def test_save_file_defaults_to_stdin(self):
        ns = _parse(["save"])
        assert ns.file == "-"


# ─────────────────────────────────────────────────────────────────────────────
# 2. list command
# ─────────────────────────────────────────────────────────────────────────────

class TestListCommand:

    def test_list_empty_store(self, store, capsys):
        from dodvault.cli.main import cmd_list
        assert cmd_list(store=store) == 0
        assert "0 characters" in capsys.readouterr().out

    def test_list_prints_summaries(self, store, capsys):
        from dodvault.cli.main import cmd_list
        asyncio.run(store.put({"_id": "r1", "Class": "Rogue"}))
        cmd_list(store=store)
        assert "r1 - Rogue" in capsys.readouterr().out


# ─────────────────────────────────────────────────────────────────────────────
# 3. show command
# ─────────────────────────────────────────────────────────────────────────────

class TestShowCommand:

    def test_show_prints_document(self, store, capsys):
        from dodvault.cli.main import cmd_show
        asyncio.run(store.put({"_id": "w1", "Class": "Wizard"}))
        assert cmd_show(store=store, identifier="w1") == 0
        printed = json.loads(capsys.readouterr().out)
        assert printed["Class"] == "Wizard"

    def test_show_unknown_id_fails(self, store, capsys):
        from dodvault.cli.main import cmd_show
        assert cmd_show(store=store, identifier="does-not-exist") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "does-not-exist" in captured.err

    def test_show_unencodable_id_fails(self, store, capsys):
        from dodvault.cli.main import cmd_show
        assert cmd_show(store=store, identifier="\udcff") == 1
        assert capsys.readouterr().out == ""


# ─────────────────────────────────────────────────────────────────────────────
# 4. save command
# ─────────────────────────────────────────────────────────────────────────────

class TestSaveCommand:

    def test_save_from_file(self, store, tmp_path):
        from dodvault.cli.main import cmd_save
        path = tmp_path / "rogue.json"
        path.write_text('{"_id": "r1", "Class": "Rogue"}', encoding="utf-8")
        assert cmd_save(store=store, source=str(path)) == 0
        assert asyncio.run(store.get("r1"))["Class"] == "Rogue"

    def test_save_from_stdin(self, store):
        from dodvault.cli.main import cmd_save
        assert cmd_save(store=store, source="-", stdin=StringIO('{"Class": "Bard"}')) == 0
        assert asyncio.run(store.all_docs()).total_rows == 1

    def test_save_malformed_fails_without_mutation(self, store, capsys):
        from dodvault.cli.main import cmd_save
        assert cmd_save(store=store, source="-", stdin=StringIO("{broken")) == 1
        assert "Malformed" in capsys.readouterr().err
        assert asyncio.run(store.all_docs()).total_rows == 0

    def test_save_unencodable_text_fails_without_mutation(self, store, capsys):
        from dodvault.cli.main import cmd_save
        assert cmd_save(store=store, source="-", stdin=StringIO('{"Class": "\\ud800"}')) == 1
        captured = capsys.readouterr()
        assert "Saved." not in captured.out
        assert captured.err.startswith("Error:")
        assert asyncio.run(store.all_docs()).total_rows == 0

    def test_save_reports_crashed_handler(self, store, monkeypatch, capsys):
        from dodvault.bridge.bridge import PersistenceBridge
        from dodvault.cli.main import cmd_save

        async def crash(self, serialized_record):
            raise RuntimeError("handler crashed")

        monkeypatch.setattr(PersistenceBridge, "handle_save", crash)
        assert cmd_save(store=store, source="-", stdin=StringIO('{"Class": "Bard"}')) == 1
        assert "handler crashed" in capsys.readouterr().err


# ─────────────────────────────────────────────────────────────────────────────
# 5. Missing responses
# ─────────────────────────────────────────────────────────────────────────────

class TestNoResponse:
    """A command whose request produced no response exits 1 instead of crashing."""

    @staticmethod
    async def _silent(self, *args):
        return None

    def test_list_without_listing_fails(self, store, monkeypatch, capsys):
        from dodvault.bridge.bridge import PersistenceBridge
        from dodvault.cli.main import NO_RESPONSE, cmd_list
        monkeypatch.setattr(PersistenceBridge, "handle_list_all", self._silent)
        assert cmd_list(store=store) == 1
        assert NO_RESPONSE in capsys.readouterr().err

    def test_show_without_payload_fails(self, store, monkeypatch, capsys):
        from dodvault.bridge.bridge import PersistenceBridge
        from dodvault.cli.main import NO_RESPONSE, cmd_show
        asyncio.run(store.put({"_id": "w1", "Class": "Wizard"}))
        monkeypatch.setattr(PersistenceBridge, "handle_get", self._silent)
        assert cmd_show(store=store, identifier="w1") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert NO_RESPONSE in captured.err


# ─────────────────────────────────────────────────────────────────────────────
# 6. main()
# ─────────────────────────────────────────────────────────────────────────────

class TestMain:

    def test_save_then_list_end_to_end(self, tmp_path, capsys):
        from dodvault.cli.main import main
        path = tmp_path / "cleric.json"
        path.write_text('{"_id": "c1", "Class": "Cleric"}', encoding="utf-8")
        base = ["--db-dir", str(tmp_path / "db"), "--name", "party"]
        assert main(base + ["save", "--file", str(path)]) == 0
        assert main(base + ["list"]) == 0
        assert "c1 - Cleric" in capsys.readouterr().out
