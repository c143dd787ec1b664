"""Persisted string key-value storage.

The resolver keeps its learned requested→resolved table here as JSON text
under a single key. ``JsonFileKeyValueStore`` writes the whole map
atomically (temp file + ``os.replace``) on every ``set``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

DEFAULT_PATH = os.path.expanduser("~/.config/spellswitch/storage.json")


def load_json(path: str, default: dict | None = None) -> dict:
    """Load a JSON object from *path*; missing or unreadable files give *default*."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return default if default is not None else {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable JSON file %s: %s", path, exc)
        return default if default is not None else {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top-level value is not an object", path)
        return default if default is not None else {}
    return data


def save_json(path: str, data: dict) -> None:
    """Atomically write *data* to *path* via a temp file in the same directory."""
    dir_path = os.path.dirname(os.path.abspath(path))
    os.makedirs(dir_path, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=dir_path, suffix=".json.tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore(KeyValueStore):
    """In-process store; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """String values kept in one JSON object on disk."""

    def __init__(self, path: str = DEFAULT_PATH):
        self.path = path
        self._data: dict[str, str] = {
            k: v for k, v in load_json(path).items() if isinstance(v, str)
        }

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        save_json(self.path, self._data)
