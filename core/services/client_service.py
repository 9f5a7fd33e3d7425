from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from core.models.client import ClientInfo
from core.models.invoice import InvoiceData

logger = logging.getLogger(__name__)

NEW_CLIENT_NAME = "Nouveau client"


def new_client() -> ClientInfo:
    return ClientInfo(name=NEW_CLIENT_NAME, address="", phone="", nif="")


def list_clients(roster: Sequence[ClientInfo]) -> List[ClientInfo]:
    return [c.snapshot() for c in roster]


def get_client(roster: Sequence[ClientInfo], client_id: str) -> Optional[ClientInfo]:
    for c in roster:
        if c.id == client_id:
            return c
    return None


def add_client(roster: Sequence[ClientInfo], client: ClientInfo) -> List[ClientInfo]:
    # les nouveaux clients apparaissent en tête du répertoire
    return [client.snapshot(), *roster]


def update_client(roster: Sequence[ClientInfo], client: ClientInfo) -> List[ClientInfo]:
    if get_client(roster, client.id) is None:
        raise KeyError(f"Client {client.id} introuvable")
    return [client.snapshot() if c.id == client.id else c for c in roster]


def delete_client(roster: Sequence[ClientInfo], client_id: str) -> List[ClientInfo]:
    return [c for c in roster if c.id != client_id]


def attach_client(invoice: InvoiceData, client: ClientInfo) -> InvoiceData:
    """
    Rattache une copie du client à la facture : modifier l'un ne touche jamais l'autre.
    """
    logger.debug("Client %s rattaché à la facture %s", client.id, invoice.invoice_number)
    return invoice.model_copy(update={"client": client.snapshot()})
