from __future__ import annotations
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QTabWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QMessageBox, QTableWidget,
    QTableWidgetItem, QHeaderView, QDialog
)
from PySide6.QtGui import QTextDocument
from PySide6.QtPrintSupport import QPrinter, QPrintDialog
import logging

from core.services.archive_service import DuplicateInvoiceNumber
from core.services.render_service import export_pdf, format_amount, render_documents_html
from core.services.session_service import InvoiceSession
from ui.widgets.client_form import ClientForm
from ui.widgets.company_form import CompanyForm
from ui.widgets.invoice_editor import InvoiceEditor

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, session: InvoiceSession, settings: dict | None = None):
        super().__init__()
        self.setWindowTitle("Facturier - Factures & Bons de livraison")
        self.resize(1280, 800)
        self.session = session
        self.settings = settings or {}

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        self.tabs.addTab(self._company_tab(), "Société")
        self.tabs.addTab(self._clients_tab(), "Clients")
        self.tab_editor = self._editor_tab()
        self.tabs.addTab(self.tab_editor, "Facture")
        self.tabs.addTab(self._archive_tab(), "Archive")
        self.tabs.setCurrentWidget(self.tab_editor)

    # ==================== SOCIÉTÉ ====================
    def _company_tab(self):
        self.company_form = CompanyForm(self, company=self.session.company)
        self.company_form.saved.connect(self._company_save)
        return self.company_form

    def _company_save(self, company):
        self.session.update_company(company)
        self.editor.load()
        QMessageBox.information(self, "Société", "Profil enregistré.")

    # ==================== CLIENTS ====================
    def _clients_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)
        bar = QHBoxLayout()
        btn_new = QPushButton("Nouveau")
        btn_edit = QPushButton("Modifier")
        btn_del = QPushButton("Supprimer")
        btn_use = QPushButton("Facturer ce client")
        bar.addWidget(btn_new); bar.addWidget(btn_edit); bar.addWidget(btn_del)
        bar.addStretch(1); bar.addWidget(btn_use)
        root.addLayout(bar)

        self.tbl_clients = QTableWidget(0, 5)
        self.tbl_clients.setHorizontalHeaderLabels(["Nom", "Adresse", "Téléphone", "NIF", "ID"])
        self.tbl_clients.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl_clients.setSelectionBehavior(self.tbl_clients.SelectionBehavior.SelectRows)
        self.tbl_clients.setEditTriggers(self.tbl_clients.EditTrigger.NoEditTriggers)
        root.addWidget(self.tbl_clients, 1)

        btn_new.clicked.connect(self._client_new)
        btn_edit.clicked.connect(self._client_edit)
        btn_del.clicked.connect(self._client_delete)
        btn_use.clicked.connect(self._client_use)
        self.tbl_clients.doubleClicked.connect(lambda *_: self._client_use())

        self._refresh_clients()
        return w

    def _refresh_clients(self):
        self.tbl_clients.setRowCount(0)
        for c in self.session.clients:
            r = self.tbl_clients.rowCount(); self.tbl_clients.insertRow(r)
            self.tbl_clients.setItem(r, 0, QTableWidgetItem(c.name or "Client sans nom"))
            self.tbl_clients.setItem(r, 1, QTableWidgetItem(c.address))
            self.tbl_clients.setItem(r, 2, QTableWidgetItem(c.phone))
            self.tbl_clients.setItem(r, 3, QTableWidgetItem(c.nif or ""))
            self.tbl_clients.setItem(r, 4, QTableWidgetItem(c.id))
        self.tbl_clients.resizeRowsToContents()

    def _selected_client_id(self):
        row = self.tbl_clients.currentRow()
        if row < 0: return None
        return self.tbl_clients.item(row, 4).text()

    def _client_new(self):
        dlg = ClientForm(self)
        if dlg.exec() == QDialog.Accepted:
            self.session.add_client(dlg.get_client())
            self._refresh_clients()

    def _client_edit(self):
        cid = self._selected_client_id()
        if not cid:
            QMessageBox.information(self, "Clients", "Sélectionne une ligne d’abord.")
            return
        current = next((c for c in self.session.clients if c.id == cid), None)
        if not current:
            QMessageBox.warning(self, "Clients", "Impossible de charger ce client.")
            return
        dlg = ClientForm(self, client=current)
        if dlg.exec() == QDialog.Accepted:
            self.session.update_client(dlg.get_client())
            self._refresh_clients()

    def _client_delete(self):
        cid = self._selected_client_id()
        if not cid:
            QMessageBox.information(self, "Clients", "Sélectionne une ligne d’abord.")
            return
        if QMessageBox.question(self, "Suppression", "Supprimer ce client ?") == QMessageBox.Yes:
            self.session.delete_client(cid)
            self._refresh_clients()

    def _client_use(self):
        cid = self._selected_client_id()
        if not cid:
            QMessageBox.information(self, "Clients", "Sélectionne une ligne d’abord.")
            return
        self.session.select_client(cid)
        self.editor.load()
        self.tabs.setCurrentWidget(self.tab_editor)

    # ==================== FACTURE ====================
    def _editor_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)
        bar = QHBoxLayout()
        btn_new = QPushButton("Nouvelle facture")
        btn_save = QPushButton("Enregistrer dans l'archive")
        btn_print = QPushButton("Imprimer")
        btn_pdf = QPushButton("Exporter en PDF")
        bar.addWidget(btn_new); bar.addStretch(1)
        bar.addWidget(btn_save); bar.addWidget(btn_print); bar.addWidget(btn_pdf)
        root.addLayout(bar)

        self.editor = InvoiceEditor(self.session, w)
        self.editor.pick_client_requested.connect(lambda: self.tabs.setCurrentIndex(1))
        root.addWidget(self.editor, 1)

        btn_new.clicked.connect(self._invoice_new)
        btn_save.clicked.connect(self._invoice_save)
        btn_print.clicked.connect(self._invoice_print)
        btn_pdf.clicked.connect(self._invoice_export_pdf)
        return w

    def _invoice_new(self):
        if QMessageBox.question(self, "Facture", "Commencer une nouvelle facture ?") == QMessageBox.Yes:
            self.session.new_invoice()
            self.editor.load()

    def _invoice_save(self):
        try:
            result = self.session.save_to_archive()
        except DuplicateInvoiceNumber as e:
            QMessageBox.warning(self, "Archive", f"{e}\nMerci de changer le numéro.")
            return
        self._refresh_archive()
        if result.inserted:
            QMessageBox.information(self, "Archive", "Facture enregistrée dans l'archive.")
        else:
            QMessageBox.information(self, "Archive", "Facture mise à jour dans l'archive.")

    def _invoice_print(self):
        printer = QPrinter(QPrinter.HighResolution)
        dlg = QPrintDialog(printer, self)
        if dlg.exec() != QDialog.Accepted:
            return
        doc = QTextDocument()
        doc.setHtml(render_documents_html(self.session.current))
        doc.print_(printer)

    def _invoice_export_pdf(self):
        try:
            out = export_pdf(self.session.current, settings=self.settings)
            QMessageBox.information(self, "PDF", f"Fichier généré :\n{out}")
        except Exception as e:
            logger.exception("Export PDF impossible")
            QMessageBox.critical(self, "PDF", str(e))

    # ==================== ARCHIVE ====================
    def _archive_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)
        bar = QHBoxLayout()
        btn_open = QPushButton("Ouvrir et modifier")
        btn_del = QPushButton("Supprimer")
        self.lbl_archive = QLabel()
        bar.addWidget(btn_open); bar.addWidget(btn_del); bar.addStretch(1); bar.addWidget(self.lbl_archive)
        root.addLayout(bar)

        self.tbl_archive = QTableWidget(0, 5)
        self.tbl_archive.setHorizontalHeaderLabels(["Numéro", "Client", "Date", "Montant total", "ID"])
        self.tbl_archive.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl_archive.setSelectionBehavior(self.tbl_archive.SelectionBehavior.SelectRows)
        self.tbl_archive.setEditTriggers(self.tbl_archive.EditTrigger.NoEditTriggers)
        root.addWidget(self.tbl_archive, 1)

        btn_open.clicked.connect(self._archive_open)
        btn_del.clicked.connect(self._archive_delete)
        self.tbl_archive.doubleClicked.connect(lambda *_: self._archive_open())

        self._refresh_archive()
        return w

    def _refresh_archive(self):
        self.tbl_archive.setRowCount(0)
        for inv in self.session.archive:
            r = self.tbl_archive.rowCount(); self.tbl_archive.insertRow(r)
            self.tbl_archive.setItem(r, 0, QTableWidgetItem(inv.invoice_number))
            self.tbl_archive.setItem(r, 1, QTableWidgetItem(inv.client.name))
            self.tbl_archive.setItem(r, 2, QTableWidgetItem(inv.date.isoformat()))
            self.tbl_archive.setItem(r, 3, QTableWidgetItem(format_amount(inv.total or 0)))
            self.tbl_archive.setItem(r, 4, QTableWidgetItem(inv.id))
        self.tbl_archive.resizeRowsToContents()
        self.lbl_archive.setText(f"{len(self.session.archive)} facture(s)")

    def _selected_archive_id(self):
        row = self.tbl_archive.currentRow()
        if row < 0: return None
        return self.tbl_archive.item(row, 4).text()

    def _archive_open(self):
        iid = self._selected_archive_id()
        if not iid:
            QMessageBox.information(self, "Archive", "Sélectionne une facture.")
            return
        self.session.open_from_archive(iid)
        self.editor.load()
        self.tabs.setCurrentWidget(self.tab_editor)

    def _archive_delete(self):
        iid = self._selected_archive_id()
        if not iid:
            QMessageBox.information(self, "Archive", "Sélectionne une facture.")
            return
        if QMessageBox.question(self, "Suppression", "Supprimer cette facture de l'archive ?") == QMessageBox.Yes:
            self.session.delete_from_archive(iid)
            self._refresh_archive()
