# core/services/render_service.py
from __future__ import annotations
import logging
import re
import datetime as dt
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pdfkit  # utilisé si wkhtmltopdf dispo
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import TEMPLATES_DIR, exports_dir, find_wkhtmltopdf, load_settings
from core.models.invoice import InvoiceData, PaymentMethod
from core.services.totals_service import totals_for

logger = logging.getLogger(__name__)

CURRENCY = "DA"
TABLE_ROWS = 12  # hauteur fixe du tableau imprimé

INVOICE = "invoice"
DELIVERY_NOTE = "delivery_note"

_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)

_PAYMENT_LABELS = {
    "CASH": "Espèces",
    "CHECK": "Chèque",
    "TRANSFER": "Virement bancaire",
}


# ---------- Formats ----------
def format_number(value: float) -> str:
    # 1234.5 -> "1 234,50"
    return f"{float(value or 0):,.2f}".replace(",", " ").replace(".", ",")

def format_amount(value: float) -> str:
    return f"{format_number(value)} {CURRENCY}"

def format_quantity(value: float) -> str:
    # valeur exacte, sans arrondi ni notation exponentielle : 1234567.0 -> "1234567"
    text = format(Decimal(repr(float(value or 0))).normalize(), "f")
    return text.replace(".", ",")

def format_date(d: Optional[dt.date]) -> str:
    if not d:
        return ""
    return f"{d.day} {_MONTHS[d.month - 1]} {d.year}"

def payment_label(method: PaymentMethod) -> str:
    return _PAYMENT_LABELS.get(method, "")

def amount_in_words(total: float) -> str:
    return f"Arrêtée la présente facture à la somme de : {format_amount(total)}."

def _slug(text: str) -> str:
    text = (text or "").strip()
    text = re.sub(r'[\\/:*?"<>|\n\r\t]', "_", text)
    text = re.sub(r"\s+", " ", text)
    return text or "facture"


# ---------- HTML ----------
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )

def _stylesheet() -> str:
    css_file = TEMPLATES_DIR / "stylesheet.css"
    return css_file.read_text(encoding="utf-8") if css_file.exists() else ""

def build_context(inv: InvoiceData) -> Dict[str, Any]:
    totals = totals_for(inv)
    return {
        "invoice": {
            "number": inv.invoice_number,
            "date": format_date(inv.date),
            "due_date": format_date(inv.due_date),
            "payment": payment_label(inv.payment_method),
            "tva_rate": format_quantity(inv.tva_rate),
            "notes": inv.notes,
            "lines": [
                {
                    "index": i,
                    "description": it.description,
                    "qty": format_quantity(it.quantity),
                    "unit_price": format_number(it.price),
                    "amount": format_number(it.amount),
                } for i, it in enumerate(inv.items, start=1)
            ],
            "filler_rows": max(0, TABLE_ROWS - len(inv.items)),
        },
        "totals": {
            "subtotal": format_amount(totals.subtotal),
            "tax": format_amount(totals.tax_amount),
            "stamp_duty": format_amount(totals.stamp_duty) if totals.stamp_duty > 0 else None,
            "total": format_amount(totals.total),
            "in_words": amount_in_words(totals.total),
        },
        "company": inv.company.model_dump(),
        "client": inv.client.model_dump(),
    }

def render_html(inv: InvoiceData, documents: Iterable[str] = (INVOICE, DELIVERY_NOTE)) -> str:
    """
    Rend le HTML via Jinja2 (core/templates/pdf/documents.html) pour les documents demandés,
    séparés par un saut de page.
    """
    tpl = _environment().get_template("documents.html")
    return tpl.render(
        documents=list(documents),
        css=_stylesheet(),
        title=f"Facture {inv.invoice_number}",
        **build_context(inv),
    )

def render_invoice_html(inv: InvoiceData) -> str:
    return render_html(inv, (INVOICE,))

def render_delivery_note_html(inv: InvoiceData) -> str:
    return render_html(inv, (DELIVERY_NOTE,))

def render_documents_html(inv: InvoiceData) -> str:
    return render_html(inv, (INVOICE, DELIVERY_NOTE))


# ---------- PDF ----------
def _render_pdf_with_weasyprint(html: str, out_path: Path, base_url: Optional[str]) -> None:
    """Fallback WeasyPrint (si wkhtmltopdf absent)."""
    try:
        from weasyprint import HTML
    except Exception as e:
        raise RuntimeError(
            "Aucun wkhtmltopdf trouvé et WeasyPrint n'est pas installé. "
            "Installe WeasyPrint (pip install weasyprint) ou configure wkhtmltopdf.\n"
            f"Détails: {e}"
        ) from e
    HTML(string=html, base_url=base_url).write_pdf(str(out_path))

def pdf_filename(inv: InvoiceData) -> str:
    number = _slug(inv.invoice_number)
    client = _slug(inv.client.name) if inv.client.name else "Client"
    return f"FAC-{number} ({client}).pdf"

def export_pdf(inv: InvoiceData, out_dir: Optional[str | Path] = None, settings: Optional[Dict[str, Any]] = None) -> str:
    """
    Génère le PDF facture + bon de livraison.
    Essaie wkhtmltopdf (pdfkit) en priorité, sinon fallback WeasyPrint.
    """
    settings = settings if settings is not None else load_settings()
    html = render_documents_html(inv)

    target_dir = Path(out_dir) if out_dir else exports_dir(settings)
    target_dir.mkdir(parents=True, exist_ok=True)
    out_path = target_dir / pdf_filename(inv)
    base_url = str(TEMPLATES_DIR.resolve())

    # 1) wkhtmltopdf d'abord
    wkhtml = find_wkhtmltopdf(settings)
    if wkhtml:
        try:
            config = pdfkit.configuration(wkhtmltopdf=wkhtml)
            options = {
                "enable-local-file-access": None,
                "quiet": "",
                "encoding": "UTF-8",
            }
            pdfkit.from_string(html, str(out_path), options=options, configuration=config)
            logger.info("PDF généré (wkhtmltopdf) : %s", out_path)
            return str(out_path)
        except Exception as e:
            logger.warning("Échec wkhtmltopdf (%s). Fallback WeasyPrint...", e)

    # 2) Fallback WeasyPrint
    _render_pdf_with_weasyprint(html, out_path, base_url=base_url)
    logger.info("PDF généré (WeasyPrint) : %s", out_path)
    return str(out_path)
