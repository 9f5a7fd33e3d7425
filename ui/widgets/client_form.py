from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QDialogButtonBox
)
from typing import Optional

from core.models.client import ClientInfo
from core.services.client_service import NEW_CLIENT_NAME


class ClientForm(QDialog):
    def __init__(self, parent=None, client: Optional[ClientInfo] = None):
        super().__init__(parent)
        self.setWindowTitle("Client")
        self.setModal(True)

        self.ed_name = QLineEdit()
        self.ed_address = QLineEdit()
        self.ed_phone = QLineEdit()
        self.ed_nif = QLineEdit()

        form = QFormLayout()
        form.addRow("Nom complet", self.ed_name)
        form.addRow("Adresse", self.ed_address)
        form.addRow("Téléphone", self.ed_phone)
        form.addRow("NIF", self.ed_nif)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

        self._orig_client = client
        if client:
            self._fill_from_client(client)
        else:
            self.ed_name.setText(NEW_CLIENT_NAME)

    def _fill_from_client(self, c: ClientInfo):
        self.ed_name.setText(c.name or "")
        self.ed_address.setText(c.address or "")
        self.ed_phone.setText(c.phone or "")
        self.ed_nif.setText(c.nif or "")

    def get_client(self) -> ClientInfo:
        """Retourne un ClientInfo (nouveau ou mis à jour). Aucun champ n'est obligatoire."""
        fields = dict(
            name=self.ed_name.text().strip(),
            address=self.ed_address.text().strip(),
            phone=self.ed_phone.text().strip(),
            nif=self.ed_nif.text().strip(),
        )
        if self._orig_client:
            # update in place
            return self._orig_client.model_copy(update=fields, deep=True)
        return ClientInfo(**fields)
