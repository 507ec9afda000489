import json
from datetime import datetime, timedelta, timezone

from typer.testing import CliRunner

import trinketbot.persistence as persistence
from trinketbot.cli import app
from trinketbot.persistence import InMemoryDocumentStore, SellerLedger


def _setup_store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    persistence._store_instance = store
    return store


def test_seller_list_shows_records():
    store = _setup_store()
    ledger = SellerLedger(store)
    stamp = datetime(2026, 1, 5, tzinfo=timezone.utc)
    ledger.record_listing("111", "thread-a", stamp)
    ledger.record_listing("222", "thread-b", stamp + timedelta(days=1))

    runner = CliRunner()
    result = runner.invoke(app, ["seller", "list"])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    lines = result.stdout.strip().splitlines()
    assert lines[0].startswith("111\tthread-a")
    assert lines[1].startswith("222\tthread-b")


def test_seller_list_empty():
    _setup_store()
    result = CliRunner().invoke(app, ["seller", "list"])
    assert result.exit_code == 0
    assert "No sellers found" in result.stdout


def test_seller_show_and_missing():
    store = _setup_store()
    SellerLedger(store).record_listing("111", "thread-a")

    runner = CliRunner()
    result = runner.invoke(app, ["seller", "show", "111"])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert "Thread: thread-a" in result.stdout
    assert "Next listing:" in result.stdout
    assert "now" not in result.stdout.splitlines()[-1]

    result_missing = runner.invoke(app, ["seller", "show", "999"])
    assert result_missing.exit_code == 1
    assert "Seller not found" in result_missing.stdout


def test_seller_import_legacy(tmp_path):
    store = _setup_store()
    cooldowns = tmp_path / "cooldowns.json"
    threads = tmp_path / "threads.json"
    cooldowns.write_text(json.dumps({"111": "2026-01-01T00:00:00+00:00", "222": "2026-01-02T00:00:00"}))
    threads.write_text(json.dumps({"111": "thread-a", "333": "orphan"}))

    result = CliRunner().invoke(
        app, ["seller", "import-legacy", "--cooldowns", str(cooldowns), "--threads", str(threads)]
    )
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert "Imported 2 seller records" in result.stdout
    ledger = SellerLedger(store)
    assert ledger.get("111").thread_id == "thread-a"
    assert ledger.get("222").thread_id is None


def test_seller_import_legacy_missing_file(tmp_path):
    _setup_store()
    result = CliRunner().invoke(app, ["seller", "import-legacy", "--cooldowns", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_run_requires_token(tmp_path, monkeypatch):
    monkeypatch.delenv("MARKETPLACE_TOKEN", raising=False)
    monkeypatch.setenv("TRINKETBOT_CONFIG", str(tmp_path / "absent.yaml"))
    result = CliRunner().invoke(app, ["run"])
    assert result.exit_code == 1
    assert "MARKETPLACE_TOKEN" in result.output
