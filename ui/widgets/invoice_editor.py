from __future__ import annotations
from typing import Optional
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QFormLayout, QComboBox, QTextEdit, QLineEdit, QGroupBox,
    QHBoxLayout, QPushButton, QTableWidget, QTableWidgetItem, QHeaderView,
    QDoubleSpinBox, QLabel, QDateEdit, QSplitter, QTextBrowser
)
from PySide6.QtCore import Qt, QDate, Signal

from core.models.invoice import InvoiceData, PAYMENT_METHODS, SetDescription, SetPrice, SetQuantity
from core.services.render_service import format_amount, format_number, format_quantity, payment_label, render_documents_html
from core.services.session_service import InvoiceSession

COL_DESC, COL_QTY, COL_PRICE, COL_AMOUNT = range(4)


def _to_float(text: str) -> float:
    # saisie libre : "1 234,5" → 1234.5, invalide → 0
    t = (text or "").replace("\u202f", "").replace("\u00a0", "").replace(" ", "").replace(",", ".")
    try:
        return float(t)
    except ValueError:
        return 0.0


def _qdate(d) -> QDate:
    return QDate(d.year, d.month, d.day)


class InvoiceEditor(QWidget):
    """Formulaire de la facture en cours + aperçu facture / bon de livraison."""
    pick_client_requested = Signal()

    def __init__(self, session: InvoiceSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._loading = False

        # -------- en-tête --------
        self.ed_number = QLineEdit()
        self.ed_date = QDateEdit(); self.ed_date.setCalendarPopup(True)
        self.ed_due = QDateEdit(); self.ed_due.setCalendarPopup(True)
        self.cb_payment = QComboBox()
        for m in PAYMENT_METHODS:
            self.cb_payment.addItem(payment_label(m), m)
        self.sp_tva = QDoubleSpinBox(); self.sp_tva.setRange(0.0, 100.0); self.sp_tva.setDecimals(2); self.sp_tva.setSuffix(" %")

        head = QFormLayout()
        head.addRow("N° de facture", self.ed_number)
        head.addRow("Date", self.ed_date)
        head.addRow("Échéance", self.ed_due)
        head.addRow("Mode de paiement", self.cb_payment)
        head.addRow("TVA", self.sp_tva)

        # -------- client --------
        grp_client = QGroupBox("Client")
        self.ed_client_name = QLineEdit()
        self.ed_client_phone = QLineEdit()
        self.ed_client_address = QLineEdit()
        btn_pick = QPushButton("Choisir dans le répertoire")
        btn_pick.clicked.connect(self.pick_client_requested.emit)
        fc = QFormLayout(grp_client)
        fc.addRow("Nom", self.ed_client_name)
        fc.addRow("Téléphone", self.ed_client_phone)
        fc.addRow("Adresse", self.ed_client_address)
        fc.addRow("", btn_pick)

        # -------- lignes --------
        self.tbl = QTableWidget(0, 4)
        self.tbl.setHorizontalHeaderLabels(["Désignation", "Qté", "Prix unitaire", "Montant"])
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl.setSelectionBehavior(self.tbl.SelectionBehavior.SelectRows)
        btn_add = QPushButton("Ajouter une ligne")
        btn_del = QPushButton("Supprimer la ligne")
        btn_add.clicked.connect(self._add_line)
        btn_del.clicked.connect(self._del_line)
        self.lab_total = QLabel()
        bar = QHBoxLayout()
        bar.addWidget(btn_add); bar.addWidget(btn_del); bar.addStretch(1); bar.addWidget(self.lab_total)

        self.ed_notes = QTextEdit()
        self.ed_notes.setMaximumHeight(80)

        form_w = QWidget()
        lay = QVBoxLayout(form_w)
        lay.addLayout(head)
        lay.addWidget(grp_client)
        lay.addLayout(bar)
        lay.addWidget(self.tbl, 1)
        lay.addWidget(QLabel("Notes"))
        lay.addWidget(self.ed_notes)

        # -------- aperçu --------
        self.preview = QTextBrowser()

        split = QSplitter(Qt.Horizontal)
        split.addWidget(form_w)
        split.addWidget(self.preview)
        split.setStretchFactor(1, 1)
        root = QVBoxLayout(self)
        root.addWidget(split)

        # -------- events --------
        self.ed_number.textEdited.connect(self._on_number)
        self.ed_date.dateChanged.connect(self._on_dates)
        self.ed_due.dateChanged.connect(self._on_dates)
        self.cb_payment.currentIndexChanged.connect(self._on_payment)
        self.sp_tva.valueChanged.connect(self._on_tva)
        self.ed_client_name.textEdited.connect(lambda v: self._on_client(name=v))
        self.ed_client_phone.textEdited.connect(lambda v: self._on_client(phone=v))
        self.ed_client_address.textEdited.connect(lambda v: self._on_client(address=v))
        self.ed_notes.textChanged.connect(self._on_notes)
        self.tbl.itemChanged.connect(self._on_cell_changed)

        self.load()

    # -------- UI helpers --------
    def load(self, inv: Optional[InvoiceData] = None):
        """Recharge tous les champs depuis la facture en cours."""
        inv = inv or self.session.current
        self._loading = True
        try:
            self.ed_number.setText(inv.invoice_number)
            self.ed_date.setDate(_qdate(inv.date))
            self.ed_due.setDate(_qdate(inv.due_date))
            self.cb_payment.setCurrentIndex(max(0, self.cb_payment.findData(inv.payment_method)))
            self.sp_tva.setValue(inv.tva_rate)
            self.ed_client_name.setText(inv.client.name)
            self.ed_client_phone.setText(inv.client.phone)
            self.ed_client_address.setText(inv.client.address)
            self.ed_notes.setPlainText(inv.notes)
            self._refresh_table()
        finally:
            self._loading = False
        self._refresh_preview()

    def _refresh_table(self):
        blocked = self.tbl.blockSignals(True)
        try:
            self.tbl.setRowCount(0)
            for it in self.session.current.items:
                r = self.tbl.rowCount()
                self.tbl.insertRow(r)
                desc = QTableWidgetItem(it.description)
                desc.setData(Qt.UserRole, it.id)
                self.tbl.setItem(r, COL_DESC, desc)
                self.tbl.setItem(r, COL_QTY, QTableWidgetItem(format_quantity(it.quantity)))
                self.tbl.setItem(r, COL_PRICE, QTableWidgetItem(format_number(it.price)))
                amount = QTableWidgetItem(format_number(it.amount))
                amount.setFlags(amount.flags() & ~Qt.ItemIsEditable)
                self.tbl.setItem(r, COL_AMOUNT, amount)
        finally:
            self.tbl.blockSignals(blocked)

    def _refresh_preview(self):
        totals = self.session.totals()
        self.lab_total.setText(f"Total TTC : {format_amount(totals.total)}")
        self.preview.setHtml(render_documents_html(self.session.current))

    def _row_item_id(self, row: int) -> Optional[str]:
        cell = self.tbl.item(row, COL_DESC)
        return cell.data(Qt.UserRole) if cell else None

    # -------- events --------
    def _on_number(self, text: str):
        self.session.set_invoice_number(text)
        self._refresh_preview()

    def _on_dates(self, *_):
        if self._loading:
            return
        self.session.set_dates(self.ed_date.date().toPython(), self.ed_due.date().toPython())
        self._refresh_preview()

    def _on_payment(self, *_):
        if self._loading:
            return
        self.session.set_payment_method(self.cb_payment.currentData())
        self._refresh_preview()

    def _on_tva(self, value: float):
        if self._loading:
            return
        self.session.set_tva_rate(value)
        self._refresh_preview()

    def _on_client(self, **fields):
        self.session.edit_client_details(**fields)
        self._refresh_preview()

    def _on_notes(self):
        if self._loading:
            return
        self.session.set_notes(self.ed_notes.toPlainText())
        self._refresh_preview()

    def _on_cell_changed(self, cell: QTableWidgetItem):
        item_id = self._row_item_id(cell.row())
        if not item_id:
            return
        col = cell.column()
        if col == COL_DESC:
            update = SetDescription(value=cell.text())
        elif col == COL_QTY:
            update = SetQuantity(value=_to_float(cell.text()))
        elif col == COL_PRICE:
            update = SetPrice(value=_to_float(cell.text()))
        else:
            return
        self.session.update_item(item_id, update)
        self._refresh_table()
        self._refresh_preview()

    def _add_line(self):
        self.session.add_item()
        self._refresh_table()
        self._refresh_preview()

    def _del_line(self):
        row = self.tbl.currentRow()
        if row < 0:
            return
        item_id = self._row_item_id(row)
        if item_id:
            self.session.remove_item(item_id)
            self._refresh_table()
            self._refresh_preview()
