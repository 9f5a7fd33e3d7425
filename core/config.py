# core/config.py
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from shutil import which
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# --- Chemins de base ---
ROOT_DIR = Path(__file__).resolve().parents[1]  # facturier/
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates" / "pdf"  # livré avec le paquet
DATA_DIR = Path(os.environ.get("FACTURIER_DATA_DIR") or ROOT_DIR / "data")
EXPORTS_DIR = ROOT_DIR / "exports"
SETTINGS_FILE = "settings.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "log_level": "INFO",
    "exports_dir": None,
    "pdf": {"wkhtmltopdf_path": None},
}


def load_settings(data_dir: os.PathLike | str | None = None) -> Dict[str, Any]:
    """Lit <data_dir>/settings.json par-dessus les valeurs par défaut."""
    path = Path(data_dir or DATA_DIR) / SETTINGS_FILE
    settings = json.loads(json.dumps(DEFAULT_SETTINGS))
    if not path.exists():
        return settings
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("settings.json ignoré (%s)", e)
        return settings
    if not isinstance(raw, dict):
        return settings
    for k, v in raw.items():
        if isinstance(v, dict) and isinstance(settings.get(k), dict):
            settings[k].update(v)
        else:
            settings[k] = v
    return settings


def exports_dir(settings: Dict[str, Any]) -> Path:
    custom = settings.get("exports_dir")
    return Path(custom) if custom else EXPORTS_DIR / "factures"


def _clean_path(p: str) -> str:
    """Corrige 'C\\:\\Program Files\\...' -> 'C:\\Program Files\\...' et normalise."""
    if not p:
        return ""
    p = p.strip().strip('"').strip("'")
    p = p.replace("\\:", ":")
    return os.path.normpath(p)


def find_wkhtmltopdf(settings: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Localise wkhtmltopdf :
    - Variables d'env (WKHTMLTOPDF, WKHTMLTOPDF_CMD)
    - settings.json -> pdf.wkhtmltopdf_path
    - chemins Windows connus
    - PATH
    """
    for env_key in ("WKHTMLTOPDF", "WKHTMLTOPDF_CMD"):
        val = os.environ.get(env_key)
        if val:
            path = _clean_path(val)
            if Path(path).is_file():
                return path

    pdf_conf = (settings or {}).get("pdf") or {}
    wk = pdf_conf.get("wkhtmltopdf_path") if isinstance(pdf_conf, dict) else None
    if wk:
        path = _clean_path(wk)
        if Path(path).is_file():
            return path

    for c in (
        r"C:\Program Files\wkhtmltopdf\bin\wkhtmltopdf.exe",
        r"C:\Program Files (x86)\wkhtmltopdf\bin\wkhtmltopdf.exe",
    ):
        if Path(c).is_file():
            return c

    found = which("wkhtmltopdf")
    return _clean_path(found) if found else None
