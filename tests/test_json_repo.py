import json
from datetime import date

from core.models.invoice import SetPrice
from core.services.session_service import InvoiceSession
from core.storage.json_repo import JsonStore
from core.storage.repo import ARCHIVE_KEY, CLIENTS_KEY, COMPANY_KEY
from conftest import TODAY


def test_missing_key_returns_default(tmp_path):
    store = JsonStore(tmp_path)
    assert store.load(CLIENTS_KEY, []) == []
    assert store.load(COMPANY_KEY) is None


def test_default_is_not_shared(tmp_path):
    store = JsonStore(tmp_path)
    default = []
    store.load(CLIENTS_KEY, default).append("x")
    assert default == []


def test_save_and_load_roundtrip(tmp_path):
    store = JsonStore(tmp_path)
    store.save(CLIENTS_KEY, [{"id": "1", "name": "Société Générale d'Études"}])

    assert (tmp_path / "clients.json").exists()
    assert JsonStore(tmp_path).load(CLIENTS_KEY) == [{"id": "1", "name": "Société Générale d'Études"}]
    # UTF-8 lisible, pas d'échappement
    assert "Études" in (tmp_path / "clients.json").read_text(encoding="utf-8")


def test_dates_are_serialized_iso(tmp_path):
    store = JsonStore(tmp_path)
    store.save("misc", {"d": date(2026, 10, 19)})
    assert store.load("misc") == {"d": "2026-10-19"}


def test_corrupt_file_falls_back_and_is_kept_aside(tmp_path):
    (tmp_path / "archive.json").write_text("{pas du json", encoding="utf-8")
    store = JsonStore(tmp_path)

    assert store.load(ARCHIVE_KEY, []) == []
    assert (tmp_path / "archive.corrupt.json").read_text(encoding="utf-8") == "{pas du json"


def test_unchanged_content_creates_no_backup(tmp_path):
    store = JsonStore(tmp_path)
    store.save(CLIENTS_KEY, [1])
    store.save(CLIENTS_KEY, [1])
    assert list(tmp_path.glob("clients.*.bak.json")) == []


def test_backups_are_rotated(tmp_path):
    store = JsonStore(tmp_path, backup_keep=2)
    for n in range(5):
        store.save(CLIENTS_KEY, [n])

    backups = list(tmp_path.glob("clients.*.bak.json"))
    assert 1 <= len(backups) <= 2
    assert store.load(CLIENTS_KEY) == [4]


def test_backups_disabled(tmp_path):
    store = JsonStore(tmp_path, backup_enabled=False)
    store.save(CLIENTS_KEY, [1])
    store.save(CLIENTS_KEY, [2])
    assert list(tmp_path.glob("*.bak.json")) == []


def test_session_state_survives_restart(tmp_path, client):
    s1 = InvoiceSession(JsonStore(tmp_path), clock=lambda: TODAY)
    s1.add_client(client)
    s1.update_item(s1.current.items[0].id, SetPrice(value=250))
    s1.save_to_archive()

    s2 = InvoiceSession(JsonStore(tmp_path), clock=lambda: TODAY)
    assert [c.id for c in s2.clients] == [client.id]
    assert s2.archive[0].id == s1.current.id
    assert s2.archive[0].items == s1.current.items
    assert s2.archive[0].date == TODAY

    raw = json.loads((tmp_path / "archive.json").read_text(encoding="utf-8"))
    assert raw[0]["date"] == "2026-10-19"
    assert raw[0]["payment_method"] == "TRANSFER"
