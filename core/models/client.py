from __future__ import annotations
from pydantic import Field
from typing import Optional
from .common import Snapshot, gen_id

class ClientInfo(Snapshot):
    id: str = Field(default_factory=gen_id)
    name: str = ""
    address: str = ""
    phone: str = ""
    nif: Optional[str] = None

    @classmethod
    def blank(cls) -> "ClientInfo":
        # client vide d'une facture neuve : pas d'id, rien à relier au répertoire
        return cls(id="", name="", address="", phone="", nif="")

    class Config:
        extra = "ignore"
