from __future__ import annotations
import datetime as dt
import logging
import random
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from core.models.client import ClientInfo
from core.models.company import CompanyInfo, DEFAULT_COMPANY
from core.models.invoice import InvoiceData, ItemUpdate, PaymentMethod
from core.models.state import AppState
from core.services import archive_service, client_service, invoice_service
from core.services.archive_service import ArchiveSaveResult
from core.services.totals_service import InvoiceTotals, totals_for
from core.storage.repo import ARCHIVE_KEY, CLIENTS_KEY, COMPANY_KEY, KeyValueStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _load_list(store: KeyValueStore, key: str, model: Type[M]) -> List[M]:
    raw = store.load(key, [])
    if not isinstance(raw, list):
        logger.warning("Clé %s : liste attendue, valeur ignorée", key)
        return []
    out: List[M] = []
    for d in raw:
        try:
            out.append(model.model_validate(d))
        except ValidationError as e:
            # On ignore les entrées invalides pour ne pas casser l'UI
            logger.warning("Entrée %s ignorée : %s", key, e.errors()[:1])
            continue
    return out


def load_state(store: KeyValueStore, today: Optional[dt.date] = None, rng: Optional[random.Random] = None) -> AppState:
    """Lecture unique au démarrage ; clé absente → profil par défaut, listes vides."""
    raw_company = store.load(COMPANY_KEY)
    company = DEFAULT_COMPANY.snapshot()
    if raw_company is not None:
        try:
            company = CompanyInfo.model_validate(raw_company)
        except ValidationError:
            logger.warning("Profil société illisible, profil par défaut utilisé")

    return AppState(
        company=company,
        clients=_load_list(store, CLIENTS_KEY, ClientInfo),
        archive=_load_list(store, ARCHIVE_KEY, InvoiceData),
        current=invoice_service.new_invoice(company, today=today, rng=rng),
    )


class InvoiceSession:
    """
    Session d'édition : porte l'AppState et écrit chaque collection modifiée
    dans le store (en entier, dernier écrit gagne). La facture en cours n'est pas persistée.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Callable[[], dt.date] = dt.date.today,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.rng = rng
        self.state = load_state(store, today=clock(), rng=rng)

    # ---------------- accès ---------------- #

    @property
    def current(self) -> InvoiceData:
        return self.state.current

    @property
    def company(self) -> CompanyInfo:
        return self.state.company

    @property
    def clients(self) -> List[ClientInfo]:
        return self.state.clients

    @property
    def archive(self) -> List[InvoiceData]:
        return self.state.archive

    def totals(self) -> InvoiceTotals:
        return totals_for(self.state.current)

    # ---------------- persistance ---------------- #

    def _persist_company(self) -> None:
        self.store.save(COMPANY_KEY, self.state.company.model_dump(mode="json"))

    def _persist_clients(self) -> None:
        self.store.save(CLIENTS_KEY, [c.model_dump(mode="json") for c in self.state.clients])

    def _persist_archive(self) -> None:
        self.store.save(ARCHIVE_KEY, [inv.model_dump(mode="json") for inv in self.state.archive])

    # ---------------- facture en cours ---------------- #

    def new_invoice(self) -> InvoiceData:
        self.state.current = invoice_service.new_invoice(self.state.company, today=self.clock(), rng=self.rng)
        return self.state.current

    def add_item(self) -> InvoiceData:
        self.state.current = invoice_service.add_item(self.state.current)
        return self.state.current

    def update_item(self, item_id: str, update: ItemUpdate) -> InvoiceData:
        self.state.current = invoice_service.update_item(self.state.current, item_id, update)
        return self.state.current

    def remove_item(self, item_id: str) -> InvoiceData:
        self.state.current = invoice_service.remove_item(self.state.current, item_id)
        return self.state.current

    def set_invoice_number(self, number: str) -> None:
        self.state.current = self.state.current.model_copy(update={"invoice_number": number})

    def set_dates(self, date: Optional[dt.date] = None, due_date: Optional[dt.date] = None) -> None:
        upd = {}
        if date is not None:
            upd["date"] = date
        if due_date is not None:
            upd["due_date"] = due_date
        self.state.current = self.state.current.model_copy(update=upd)

    def set_payment_method(self, method: PaymentMethod) -> None:
        self.state.current = self.state.current.model_copy(update={"payment_method": method})

    def set_tva_rate(self, rate: float) -> None:
        self.state.current = self.state.current.model_copy(update={"tva_rate": float(rate)})

    def set_notes(self, notes: str) -> None:
        self.state.current = self.state.current.model_copy(update={"notes": notes})

    def edit_client_details(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[str] = None,
        phone: Optional[str] = None,
        nif: Optional[str] = None,
    ) -> ClientInfo:
        """Modifie le client de la facture seulement, jamais la fiche du répertoire."""
        fields = {"name": name, "address": address, "phone": phone, "nif": nif}
        client = self.state.current.client.model_copy(
            update={k: v for k, v in fields.items() if v is not None}
        )
        self.state.current = self.state.current.model_copy(update={"client": client})
        return client

    # ---------------- société ---------------- #

    def update_company(self, company: CompanyInfo) -> None:
        self.state.company = company.snapshot()
        self._persist_company()
        # la facture en cours suit le profil ; les factures archivées gardent leur copie
        self.state.current = invoice_service.with_company(self.state.current, self.state.company)

    # ---------------- clients ---------------- #

    def add_client(self, client: Optional[ClientInfo] = None) -> ClientInfo:
        c = client or client_service.new_client()
        self.state.clients = client_service.add_client(self.state.clients, c)
        self._persist_clients()
        return c

    def update_client(self, client: ClientInfo) -> None:
        self.state.clients = client_service.update_client(self.state.clients, client)
        self._persist_clients()

    def delete_client(self, client_id: str) -> None:
        self.state.clients = client_service.delete_client(self.state.clients, client_id)
        self._persist_clients()

    def select_client(self, client_id: str) -> InvoiceData:
        client = client_service.get_client(self.state.clients, client_id)
        if client is None:
            raise KeyError(f"Client {client_id} introuvable")
        self.state.current = client_service.attach_client(self.state.current, client)
        return self.state.current

    # ---------------- archive ---------------- #

    def save_to_archive(self) -> ArchiveSaveResult:
        """Lève DuplicateInvoiceNumber sans rien écrire si le numéro est déjà pris."""
        result = archive_service.save_to_archive(self.state.archive, self.state.current)
        self.state.archive = result.archive
        self._persist_archive()
        return result

    def open_from_archive(self, invoice_id: str) -> InvoiceData:
        self.state.current = archive_service.open_from_archive(self.state.archive, invoice_id)
        return self.state.current

    def delete_from_archive(self, invoice_id: str) -> None:
        self.state.archive = archive_service.remove_from_archive(self.state.archive, invoice_id)
        self._persist_archive()
        logger.info("Facture %s supprimée de l'archive", invoice_id)
