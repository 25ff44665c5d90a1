import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class StorageAdapter(Protocol):
    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, payload: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, payload: str) -> None:
        self.data[key] = payload


class JsonFileStorage:
    """Keeps every key in one JSON object on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"[BASKET] Ignoring unreadable storage file {self.path}: {e}")
            return {}

    def load(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def save(self, key: str, payload: str) -> None:
        data = self._read()
        data[key] = payload
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
