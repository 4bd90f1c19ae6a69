"""
Key-value stores the client persists its session in.

``FileStorage`` survives restarts like a browser's local storage;
``MemoryStorage`` lives only as long as the process, like session storage.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pydantic import ValidationError

from tracker.schemas.protocol import User

logger = logging.getLogger(__name__)

# The key for the logged-in user in both stores
STORAGE_KEY_USER = "testTrackerUser"


class KeyValueStorage(ABC):
    """String-to-string storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage(KeyValueStorage):
    """Storage scoped to the running session."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(KeyValueStorage):
    """Durable storage backed by a JSON object in a single file."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


def get_user(storage: KeyValueStorage) -> Optional[User]:
    """Read the stored user, treating a corrupt entry as absent."""
    raw = storage.get_item(STORAGE_KEY_USER)
    if raw is None:
        return None
    try:
        return User.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding invalid stored user: {e}")
        return None


def set_user(storage: KeyValueStorage, user: User) -> None:
    storage.set_item(STORAGE_KEY_USER, user.model_dump_json())
