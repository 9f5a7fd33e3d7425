# core/services/invoice_service.py
from __future__ import annotations
import logging
import random
from datetime import date, timedelta
from typing import Optional

from core.models.client import ClientInfo
from core.models.company import CompanyInfo
from core.models.invoice import InvoiceData, InvoiceItem, ItemUpdate

logger = logging.getLogger(__name__)

DEFAULT_TVA_RATE = 19.0
DEFAULT_PAYMENT_METHOD = "TRANSFER"
PAYMENT_TERM_DAYS = 30
DEFAULT_NOTES = "La présente facture vaut contrat de vente entre les deux parties."


# ----------- numérotation -----------
def default_invoice_number(today: date, rng: Optional[random.Random] = None) -> str:
    # "<année>/<100..999>" ; l'unicité n'est vérifiée qu'à l'archivage
    r = rng or random
    return f"{today.year}/{r.randint(100, 999)}"


def blank_item() -> InvoiceItem:
    return InvoiceItem(description="", price=0.0, quantity=1.0)


# ----------- création -----------
def new_invoice(company: CompanyInfo, today: Optional[date] = None, rng: Optional[random.Random] = None) -> InvoiceData:
    today = today or date.today()
    inv = InvoiceData(
        invoice_number=default_invoice_number(today, rng),
        date=today,
        due_date=today + timedelta(days=PAYMENT_TERM_DAYS),
        company=company.snapshot(),
        client=ClientInfo.blank(),
        items=[blank_item()],
        tva_rate=DEFAULT_TVA_RATE,
        payment_method=DEFAULT_PAYMENT_METHOD,
        notes=DEFAULT_NOTES,
    )
    logger.debug("Nouvelle facture %s (%s)", inv.invoice_number, inv.id)
    return inv


# ----------- lignes -----------
def add_item(inv: InvoiceData) -> InvoiceData:
    return inv.model_copy(update={"items": [*inv.items, blank_item()]})


def remove_item(inv: InvoiceData, item_id: str) -> InvoiceData:
    return inv.model_copy(update={"items": [it for it in inv.items if it.id != item_id]})


def update_item(inv: InvoiceData, item_id: str, update: ItemUpdate) -> InvoiceData:
    items = [update.apply(it) if it.id == item_id else it for it in inv.items]
    return inv.model_copy(update={"items": items})


# ----------- en-tête -----------
def with_company(inv: InvoiceData, company: CompanyInfo) -> InvoiceData:
    return inv.model_copy(update={"company": company.snapshot()})
