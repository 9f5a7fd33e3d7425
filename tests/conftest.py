import random
from datetime import date

import pytest

from core.models.client import ClientInfo
from core.models.company import DEFAULT_COMPANY
from core.models.invoice import InvoiceData, InvoiceItem
from core.services.session_service import InvoiceSession
from core.storage.repo import MemoryStore

TODAY = date(2026, 10, 19)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def session(store, rng):
    return InvoiceSession(store, clock=lambda: TODAY, rng=rng)


@pytest.fixture
def client():
    return ClientInfo(name="SARL Atlas", address="12 rue Didouche Mourad, Alger", phone="0550 00 00 00", nif="000016000000001")


def make_invoice(number="2026/101", items=None, method="TRANSFER", **kw):
    return InvoiceData(
        invoice_number=number,
        date=TODAY,
        due_date=TODAY,
        company=DEFAULT_COMPANY.snapshot(),
        items=items if items is not None else [InvoiceItem(description="Prestation", price=1000, quantity=1)],
        payment_method=method,
        **kw,
    )
