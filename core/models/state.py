from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List
from .client import ClientInfo
from .company import CompanyInfo, DEFAULT_COMPANY
from .invoice import InvoiceData

class AppState(BaseModel):
    """État complet d'une session : profil, répertoire clients, archive et facture en cours."""
    company: CompanyInfo = Field(default_factory=DEFAULT_COMPANY.snapshot)
    clients: List[ClientInfo] = Field(default_factory=list)
    archive: List[InvoiceData] = Field(default_factory=list)
    current: InvoiceData
