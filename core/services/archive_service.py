from __future__ import annotations
import logging
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel

from core.models.invoice import InvoiceData
from core.services.totals_service import totals_for

logger = logging.getLogger(__name__)

SaveOutcome = Literal["INSERTED", "UPDATED"]


class DuplicateInvoiceNumber(ValueError):
    """Numéro de facture déjà utilisé par une autre facture archivée."""

    def __init__(self, invoice_number: str):
        super().__init__(f"Le numéro de facture {invoice_number} existe déjà dans l'archive.")
        self.invoice_number = invoice_number


class ArchiveSaveResult(BaseModel):
    archive: List[InvoiceData]
    invoice: InvoiceData  # copie archivée, total figé
    outcome: SaveOutcome

    @property
    def inserted(self) -> bool:
        return self.outcome == "INSERTED"


def _index_of(archive: Sequence[InvoiceData], invoice_id: str) -> int:
    for i, inv in enumerate(archive):
        if inv.id == invoice_id:
            return i
    return -1


def save_to_archive(archive: Sequence[InvoiceData], candidate: InvoiceData) -> ArchiveSaveResult:
    """
    Archive `candidate` (upsert par id). L'archive reçue n'est jamais modifiée :
    une nouvelle liste est renvoyée.
    - même id présent → remplacé à la même position
    - sinon → inséré en tête (plus récent d'abord)
    """
    if any(inv.invoice_number == candidate.invoice_number and inv.id != candidate.id for inv in archive):
        raise DuplicateInvoiceNumber(candidate.invoice_number)

    stored = candidate.model_copy(deep=True)
    stored.total = totals_for(candidate).total

    new_archive = list(archive)
    idx = _index_of(new_archive, stored.id)
    if idx >= 0:
        new_archive[idx] = stored
        outcome: SaveOutcome = "UPDATED"
    else:
        new_archive.insert(0, stored)
        outcome = "INSERTED"
    logger.info("Facture %s archivée (%s), total %.2f", stored.invoice_number, outcome, stored.total)
    return ArchiveSaveResult(archive=new_archive, invoice=stored, outcome=outcome)


def find_in_archive(archive: Sequence[InvoiceData], invoice_id: str) -> Optional[InvoiceData]:
    idx = _index_of(archive, invoice_id)
    return archive[idx] if idx >= 0 else None


def open_from_archive(archive: Sequence[InvoiceData], invoice_id: str) -> InvoiceData:
    """Copie éditable d'une facture archivée."""
    inv = find_in_archive(archive, invoice_id)
    if inv is None:
        raise KeyError(f"Facture {invoice_id} introuvable dans l'archive")
    return inv.model_copy(deep=True)


def remove_from_archive(archive: Sequence[InvoiceData], invoice_id: str) -> List[InvoiceData]:
    return [inv for inv in archive if inv.id != invoice_id]
