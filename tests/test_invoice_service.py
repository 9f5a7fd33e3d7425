import re
from datetime import date, timedelta

from core.models.company import DEFAULT_COMPANY
from core.models.invoice import SetDescription, SetPrice, SetQuantity
from core.services import invoice_service


def test_new_invoice_defaults(today, rng):
    inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=today, rng=rng)

    assert len(inv.items) == 1
    assert inv.items[0].quantity == 1
    assert inv.items[0].price == 0
    assert inv.items[0].description == ""
    assert inv.tva_rate == 19
    assert inv.payment_method == "TRANSFER"
    assert inv.date == today
    assert inv.due_date - inv.date == timedelta(days=30)
    assert inv.notes == invoice_service.DEFAULT_NOTES
    assert inv.client.id == "" and inv.client.name == ""
    assert inv.total is None


def test_new_invoice_number_format(today, rng):
    for _ in range(50):
        inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=today, rng=rng)
        m = re.fullmatch(r"2026/(\d{3})", inv.invoice_number)
        assert m
        assert 100 <= int(m.group(1)) <= 999


def test_new_invoice_ids_are_unique(today):
    ids = {invoice_service.new_invoice(DEFAULT_COMPANY, today=today).id for _ in range(20)}
    assert len(ids) == 20


def test_new_invoice_due_date_crosses_year():
    inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=date(2026, 12, 15))
    assert inv.due_date == date(2027, 1, 14)


def test_company_is_a_snapshot(today):
    company = DEFAULT_COMPANY.snapshot()
    inv = invoice_service.new_invoice(company, today=today)
    company.name = "Autre société"
    assert inv.company.name == DEFAULT_COMPANY.name


def test_add_and_remove_items(today):
    inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=today)
    inv = invoice_service.add_item(inv)
    assert len(inv.items) == 2
    assert inv.items[1].quantity == 1

    first_id = inv.items[0].id
    inv = invoice_service.remove_item(inv, first_id)
    assert [it.id for it in inv.items] != [first_id]
    assert len(inv.items) == 1

    inv = invoice_service.remove_item(inv, inv.items[0].id)
    assert inv.items == []


def test_remove_unknown_item_is_ignored(today):
    inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=today)
    assert len(invoice_service.remove_item(inv, "inconnu").items) == 1


def test_update_item_with_tagged_updates(today):
    inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=today)
    item_id = inv.items[0].id

    inv = invoice_service.update_item(inv, item_id, SetDescription(value="Câble 3x2,5"))
    inv = invoice_service.update_item(inv, item_id, SetPrice(value=120.5))
    inv = invoice_service.update_item(inv, item_id, SetQuantity(value=4))

    item = inv.items[0]
    assert item.id == item_id
    assert item.description == "Câble 3x2,5"
    assert item.price == 120.5
    assert item.quantity == 4
    assert item.amount == 482


def test_update_item_does_not_touch_previous_invoice(today):
    before = invoice_service.new_invoice(DEFAULT_COMPANY, today=today)
    after = invoice_service.update_item(before, before.items[0].id, SetPrice(value=10))
    assert before.items[0].price == 0
    assert after.items[0].price == 10


def test_update_unknown_item_keeps_items(today):
    inv = invoice_service.new_invoice(DEFAULT_COMPANY, today=today)
    out = invoice_service.update_item(inv, "inconnu", SetPrice(value=10))
    assert out.items == inv.items
