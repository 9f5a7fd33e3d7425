from __future__ import annotations
import copy
import json
from typing import Any, Dict, Protocol

# Clés des trois collections persistées
COMPANY_KEY = "company"
CLIENTS_KEY = "clients"
ARCHIVE_KEY = "archive"


class KeyValueStore(Protocol):
    """Contrat minimal de persistance : une valeur JSON par clé, dernier écrit gagne."""

    def load(self, key: str, default: Any = None) -> Any: ...

    def save(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """Store en mémoire (tests, aperçus). Copie les valeurs comme le ferait une sérialisation."""

    def __init__(self, initial: Dict[str, Any] | None = None):
        self.data: Dict[str, str] = {
            k: json.dumps(v, ensure_ascii=False) for k, v in (initial or {}).items()
        }
        self.writes = 0

    def load(self, key: str, default: Any = None) -> Any:
        raw = self.data.get(key)
        if raw is None:
            return copy.deepcopy(default)
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        self.data[key] = json.dumps(value, ensure_ascii=False)
        self.writes += 1
