from __future__ import annotations
from typing import Iterable
from pydantic import BaseModel

from core.models.invoice import InvoiceData, InvoiceItem, PaymentMethod

# Droit de timbre (paiement en espèces) : 1 % du TTC, borné
STAMP_DUTY_RATE = 0.01
STAMP_DUTY_MIN = 5.0
STAMP_DUTY_MAX = 10000.0


class InvoiceTotals(BaseModel):
    subtotal: float = 0.0
    tax_amount: float = 0.0
    stamp_duty: float = 0.0
    total: float = 0.0


def stamp_duty_for(amount_ttc: float, payment_method: PaymentMethod) -> float:
    if payment_method != "CASH":
        return 0.0
    # plancher puis plafond
    return min(max(amount_ttc * STAMP_DUTY_RATE, STAMP_DUTY_MIN), STAMP_DUTY_MAX)


def compute_totals(items: Iterable[InvoiceItem], tva_rate: float, payment_method: PaymentMethod) -> InvoiceTotals:
    """Sous-total, TVA, timbre et total. Aucune validation : les valeurs négatives passent telles quelles."""
    subtotal = sum((it.price * it.quantity for it in items), 0.0)
    tax_amount = subtotal * (tva_rate / 100)
    stamp_duty = stamp_duty_for(subtotal + tax_amount, payment_method)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        stamp_duty=stamp_duty,
        total=subtotal + tax_amount + stamp_duty,
    )


def totals_for(invoice: InvoiceData) -> InvoiceTotals:
    return compute_totals(invoice.items, invoice.tva_rate, invoice.payment_method)
