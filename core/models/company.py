from __future__ import annotations
from .common import Snapshot

class CompanyInfo(Snapshot):
    name: str = ""
    address: str = ""
    phone: str = ""
    rc: str = ""     # registre du commerce
    nif: str = ""    # identifiant fiscal
    nis: str = ""    # identifiant statistique
    ai: str = ""     # article d'imposition
    bank_name: str = ""
    bank_account: str = ""

    class Config:
        extra = "ignore"


DEFAULT_COMPANY = CompanyInfo(
    name="Établissement Innovation Services Numériques",
    address="Cité 1200 Logements, Dar El Beïda, Alger",
    phone="+213 23 45 67 89",
    rc="16/00-9876543B21",
    nif="001916012345678",
    nis="192016001234567",
    ai="16011234567",
    bank_name="Crédit Populaire d'Algérie (CPA)",
    bank_account="004 00123 4123456789 22",
)
