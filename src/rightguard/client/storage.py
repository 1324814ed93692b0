"""Local durable key/value storage for the client session."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from rightguard.constants import DEFAULT_JURISDICTION, DEFAULT_LANGUAGE, LANGUAGES, LOCAL_STORAGE_KEYS
from rightguard.models import User

LOGGER = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """String keys to JSON-compatible values, surviving process restarts where possible."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Persist every key in one JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Client storage at %s is unreadable; starting empty", self.path, exc_info=True)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write(self, payload: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, key: str) -> Any:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            payload = self._read()
            payload[key] = value
            self._write(payload)

    def remove(self, key: str) -> None:
        with self._lock:
            payload = self._read()
            if key in payload:
                del payload[key]
                self._write(payload)


class StorageService:
    """Typed accessors over the four persisted session keys.

    Each value defaults independently; a missing or corrupt value reads as its
    default.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def get_user(self) -> Optional[User]:
        raw = self._storage.get(LOCAL_STORAGE_KEYS["user"])
        if not raw:
            return None
        try:
            return User.model_validate(raw)
        except ValidationError:
            LOGGER.warning("Ignoring corrupt stored user")
            return None

    def set_user(self, user: User) -> None:
        self._storage.set(LOCAL_STORAGE_KEYS["user"], user.to_wire())

    def clear_user(self) -> None:
        self._storage.remove(LOCAL_STORAGE_KEYS["user"])

    def get_language(self) -> str:
        raw = self._storage.get(LOCAL_STORAGE_KEYS["language"])
        return raw if isinstance(raw, str) and raw in LANGUAGES else DEFAULT_LANGUAGE

    def set_language(self, language: str) -> None:
        self._storage.set(LOCAL_STORAGE_KEYS["language"], language)

    def get_selected_state(self) -> str:
        raw = self._storage.get(LOCAL_STORAGE_KEYS["selected_state"])
        return raw if isinstance(raw, str) and raw else DEFAULT_JURISDICTION

    def set_selected_state(self, state: str) -> None:
        self._storage.set(LOCAL_STORAGE_KEYS["selected_state"], state)

    def get_emergency_contacts(self) -> List[str]:
        raw = self._storage.get(LOCAL_STORAGE_KEYS["emergency_contacts"])
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, str) and item]

    def set_emergency_contacts(self, contacts: List[str]) -> None:
        self._storage.set(LOCAL_STORAGE_KEYS["emergency_contacts"], list(contacts))


__all__ = ["JsonFileStorage", "KeyValueStorage", "MemoryStorage", "StorageService"]
