from datetime import date

import pytest

from core.models.client import ClientInfo
from core.models.company import CompanyInfo, DEFAULT_COMPANY
from core.models.invoice import SetPrice
from core.services.archive_service import DuplicateInvoiceNumber
from core.services.session_service import InvoiceSession
from core.storage.repo import ARCHIVE_KEY, CLIENTS_KEY, COMPANY_KEY, MemoryStore
from conftest import TODAY, make_invoice


def test_fresh_session_uses_defaults(session):
    assert session.company == DEFAULT_COMPANY
    assert session.clients == []
    assert session.archive == []
    assert session.current.date == TODAY
    assert len(session.current.items) == 1


def test_session_loads_stored_collections():
    stored = make_invoice("2026/777")
    store = MemoryStore({
        COMPANY_KEY: CompanyInfo(name="SPA Nord").model_dump(mode="json"),
        CLIENTS_KEY: [ClientInfo(name="Client A").model_dump(mode="json")],
        ARCHIVE_KEY: [stored.model_dump(mode="json")],
    })
    s = InvoiceSession(store, clock=lambda: TODAY)

    assert s.company.name == "SPA Nord"
    assert s.current.company.name == "SPA Nord"
    assert [c.name for c in s.clients] == ["Client A"]
    assert s.archive[0].id == stored.id
    assert s.archive[0].date == TODAY


def test_invalid_records_are_skipped():
    store = MemoryStore({
        COMPANY_KEY: ["pas", "un", "objet"],
        CLIENTS_KEY: [{"name": "Valide"}, {"name": {"invalide": True}}],
        ARCHIVE_KEY: "pas une liste",
    })
    s = InvoiceSession(store, clock=lambda: TODAY)

    assert s.company == DEFAULT_COMPANY
    assert [c.name for c in s.clients] == ["Valide"]
    assert s.archive == []


def test_save_to_archive_persists(session, store):
    session.update_item(session.current.items[0].id, SetPrice(value=1000))
    result = session.save_to_archive()

    assert result.outcome == "INSERTED"
    saved = store.load(ARCHIVE_KEY)
    assert len(saved) == 1
    assert saved[0]["id"] == session.current.id
    assert saved[0]["total"] == pytest.approx(1190)


def test_resave_updates(session):
    session.save_to_archive()
    session.set_notes("seconde version")
    result = session.save_to_archive()

    assert result.outcome == "UPDATED"
    assert len(session.archive) == 1
    assert session.archive[0].notes == "seconde version"


def test_duplicate_number_writes_nothing(session, store):
    session.set_invoice_number("2026/500")
    session.save_to_archive()
    writes = store.writes

    session.new_invoice()
    session.set_invoice_number("2026/500")
    with pytest.raises(DuplicateInvoiceNumber):
        session.save_to_archive()

    assert store.writes == writes
    assert len(session.archive) == 1


def test_new_invoice_gets_new_id(session):
    first = session.current.id
    session.new_invoice()
    assert session.current.id != first


def test_header_setters(session):
    session.set_invoice_number("2026/123")
    session.set_dates(date(2026, 1, 2), date(2026, 2, 1))
    session.set_payment_method("CASH")
    session.set_tva_rate(9)

    inv = session.current
    assert inv.invoice_number == "2026/123"
    assert inv.date == date(2026, 1, 2)
    assert inv.due_date == date(2026, 2, 1)
    assert inv.payment_method == "CASH"
    assert inv.tva_rate == 9
    assert session.totals().stamp_duty == 5


def test_set_dates_partial(session):
    due = session.current.due_date
    session.set_dates(date=date(2026, 3, 3))
    assert session.current.date == date(2026, 3, 3)
    assert session.current.due_date == due


def test_items_through_session(session):
    session.add_item()
    assert len(session.current.items) == 2
    session.remove_item(session.current.items[0].id)
    session.remove_item(session.current.items[0].id)
    assert session.current.items == []
    assert session.totals().total == 0


def test_client_roster_is_persisted(session, store, client):
    session.add_client(client)
    created = session.add_client()

    assert [c.name for c in session.clients] == ["Nouveau client", "SARL Atlas"]
    assert [c["id"] for c in store.load(CLIENTS_KEY)] == [created.id, client.id]

    session.update_client(created.model_copy(update={"name": "EURL Sud"}))
    assert store.load(CLIENTS_KEY)[0]["name"] == "EURL Sud"

    session.delete_client(created.id)
    assert [c["id"] for c in store.load(CLIENTS_KEY)] == [client.id]


def test_select_client_and_edit_copy(session, client):
    session.add_client(client)
    session.select_client(client.id)
    session.edit_client_details(name="Nom sur facture", phone="0770")

    assert session.current.client.name == "Nom sur facture"
    assert session.current.client.phone == "0770"
    assert session.current.client.address == client.address
    assert session.clients[0].name == "SARL Atlas"


def test_select_unknown_client_raises(session):
    with pytest.raises(KeyError):
        session.select_client("inconnu")


def test_update_company_refreshes_live_invoice_only(session, store):
    session.save_to_archive()
    session.update_company(CompanyInfo(name="Nouvelle raison sociale"))

    assert store.load(COMPANY_KEY)["name"] == "Nouvelle raison sociale"
    assert session.current.company.name == "Nouvelle raison sociale"
    assert session.archive[0].company.name == DEFAULT_COMPANY.name


def test_open_from_archive_edits_a_copy(session):
    session.set_invoice_number("2026/900")
    session.save_to_archive()
    archived_id = session.current.id

    session.new_invoice()
    session.open_from_archive(archived_id)
    session.set_notes("brouillon")

    assert session.current.id == archived_id
    assert session.archive[0].notes != "brouillon"


def test_delete_from_archive(session, store):
    session.save_to_archive()
    session.delete_from_archive(session.current.id)
    assert session.archive == []
    assert store.load(ARCHIVE_KEY) == []


def test_current_invoice_is_not_persisted(session, store):
    session.set_notes("rien à écrire")
    session.add_item()
    assert store.writes == 0
