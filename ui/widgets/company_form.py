from __future__ import annotations
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QLineEdit, QPushButton, QGroupBox
)

from core.models.company import CompanyInfo


class CompanyForm(QWidget):
    """
    Profil de la société (en-tête des documents).
    - Émet `saved` avec le CompanyInfo saisi.
    """
    saved = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None, company: Optional[CompanyInfo] = None):
        super().__init__(parent)

        self.ed_name = QLineEdit()
        self.ed_address = QLineEdit()
        self.ed_phone = QLineEdit()
        self.ed_bank_name = QLineEdit()
        self.ed_bank_account = QLineEdit()
        self.ed_rc = QLineEdit()
        self.ed_nif = QLineEdit()
        self.ed_nis = QLineEdit()
        self.ed_ai = QLineEdit()

        grp_general = QGroupBox("Informations générales")
        f1 = QFormLayout(grp_general)
        f1.addRow("Raison sociale", self.ed_name)
        f1.addRow("Adresse", self.ed_address)
        f1.addRow("Téléphone", self.ed_phone)

        grp_bank = QGroupBox("Coordonnées bancaires")
        f2 = QFormLayout(grp_bank)
        f2.addRow("Banque", self.ed_bank_name)
        f2.addRow("RIB", self.ed_bank_account)

        grp_legal = QGroupBox("Informations légales")
        f3 = QFormLayout(grp_legal)
        f3.addRow("Registre du commerce (RC)", self.ed_rc)
        f3.addRow("Identifiant fiscal (NIF)", self.ed_nif)
        f3.addRow("Identifiant statistique (NIS)", self.ed_nis)
        f3.addRow("Article d'imposition (AI)", self.ed_ai)

        btn_save = QPushButton("Enregistrer")
        btn_save.clicked.connect(lambda: self.saved.emit(self.get_company()))
        bar = QHBoxLayout()
        bar.addStretch(1)
        bar.addWidget(btn_save)

        root = QVBoxLayout(self)
        root.addWidget(grp_general)
        root.addWidget(grp_bank)
        root.addWidget(grp_legal)
        root.addStretch(1)
        root.addLayout(bar)

        if company:
            self.set_company(company)

    def set_company(self, c: CompanyInfo) -> None:
        self.ed_name.setText(c.name)
        self.ed_address.setText(c.address)
        self.ed_phone.setText(c.phone)
        self.ed_bank_name.setText(c.bank_name)
        self.ed_bank_account.setText(c.bank_account)
        self.ed_rc.setText(c.rc)
        self.ed_nif.setText(c.nif)
        self.ed_nis.setText(c.nis)
        self.ed_ai.setText(c.ai)

    def get_company(self) -> CompanyInfo:
        return CompanyInfo(
            name=self.ed_name.text().strip(),
            address=self.ed_address.text().strip(),
            phone=self.ed_phone.text().strip(),
            bank_name=self.ed_bank_name.text().strip(),
            bank_account=self.ed_bank_account.text().strip(),
            rc=self.ed_rc.text().strip(),
            nif=self.ed_nif.text().strip(),
            nis=self.ed_nis.text().strip(),
            ai=self.ed_ai.text().strip(),
        )
