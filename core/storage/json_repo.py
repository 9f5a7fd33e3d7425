from __future__ import annotations

import copy
import glob
import json
import logging
import shutil
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    return str(o)


class JsonStore:
    """
    Store clé → fichier JSON (<data_dir>/<clé>.json).
    - Rotation de backups (backup_enabled, backup_keep)
    - N'écrit pas si le contenu ne change pas (réduction du bruit et des .bak)
    - Fichier corrompu → copié en .corrupt.json, valeur par défaut renvoyée
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.data_dir = Path(data_dir)
        self._lock = threading.Lock()
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    # ---------------- Lecture ---------------- #

    def load(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return copy.deepcopy(default)
        except json.JSONDecodeError:
            backup = path.with_suffix(".corrupt.json")
            logger.warning("Fichier %s illisible, copie vers %s", path, backup)
            try:
                shutil.copy2(path, backup)
            except OSError:
                logger.exception("Copie de %s impossible", path)
            return copy.deepcopy(default)

    # ---------------- Écriture ---------------- #

    def _rotate_backups(self, path: Path) -> None:
        if not self.backup_enabled or self.backup_keep <= 0:
            return
        pattern = str(path.with_suffix(".*.bak.json"))
        files = sorted(glob.glob(pattern))
        # garde les plus récents
        if len(files) > self.backup_keep:
            for old in files[: len(files) - self.backup_keep]:
                Path(old).unlink(missing_ok=True)

    def save(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        with self._lock:
            new_dump = json.dumps(value, ensure_ascii=False, indent=2, default=_json_default)

            # si contenu identique → ne rien faire
            if path.exists():
                try:
                    if path.read_text(encoding="utf-8") == new_dump:
                        return
                except OSError:
                    pass

            # backup
            if self.backup_enabled and path.exists():
                ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
                backup = path.with_suffix(f".{ts}.bak.json")
                try:
                    shutil.copy2(path, backup)
                except OSError:
                    logger.warning("Backup de %s impossible", path)
                self._rotate_backups(path)

            with path.open("w", encoding="utf-8") as f:
                f.write(new_dump)
            logger.debug("Écrit %s", path)
