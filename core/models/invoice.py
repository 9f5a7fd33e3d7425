from __future__ import annotations
import datetime as dt
from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union
from .common import Snapshot, gen_id
from .client import ClientInfo
from .company import CompanyInfo

PaymentMethod = Literal["CASH", "TRANSFER", "CHECK"]
PAYMENT_METHODS: tuple[str, ...] = ("TRANSFER", "CHECK", "CASH")

class InvoiceItem(Snapshot):
    id: str = Field(default_factory=gen_id)
    description: str = ""
    price: float = 0.0
    quantity: float = 1.0

    @property
    def amount(self) -> float:
        return self.price * self.quantity

class InvoiceData(Snapshot):
    id: str = Field(default_factory=gen_id)
    invoice_number: str = ""
    date: dt.date = Field(default_factory=dt.date.today)
    due_date: dt.date = Field(default_factory=dt.date.today)

    company: CompanyInfo = Field(default_factory=CompanyInfo)
    client: ClientInfo = Field(default_factory=ClientInfo.blank)

    items: List[InvoiceItem] = Field(default_factory=list)
    tva_rate: float = 19.0
    payment_method: PaymentMethod = "TRANSFER"
    notes: str = ""

    # snapshot posé à l'archivage, jamais recalculé ensuite
    total: Optional[float] = None

    class Config:
        extra = "ignore"


# ---------- Mises à jour de ligne ----------

class SetDescription(BaseModel):
    kind: Literal["description"] = "description"
    value: str

    def apply(self, item: InvoiceItem) -> InvoiceItem:
        return item.model_copy(update={"description": self.value})

class SetPrice(BaseModel):
    kind: Literal["price"] = "price"
    value: float

    def apply(self, item: InvoiceItem) -> InvoiceItem:
        return item.model_copy(update={"price": float(self.value)})

class SetQuantity(BaseModel):
    kind: Literal["quantity"] = "quantity"
    value: float

    def apply(self, item: InvoiceItem) -> InvoiceItem:
        return item.model_copy(update={"quantity": float(self.value)})

ItemUpdate = Union[SetDescription, SetPrice, SetQuantity]
