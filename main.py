from __future__ import annotations
import logging
import sys

from core.config import DATA_DIR, load_settings
from core.services.session_service import InvoiceSession
from core.storage.json_repo import JsonStore


def main() -> int:
    settings = load_settings(DATA_DIR)
    logging.basicConfig(
        level=getattr(logging, str(settings.get("log_level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from PySide6.QtWidgets import QApplication
    from ui.main_window import MainWindow

    app = QApplication(sys.argv)
    session = InvoiceSession(JsonStore(DATA_DIR))
    win = MainWindow(session, settings=settings)
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
