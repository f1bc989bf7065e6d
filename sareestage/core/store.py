"""
Key-value persistence used for guest ids, sessions and credit balances.

Values are strings, the way browser local storage holds them. ``MemoryStore``
serves a single process, ``JsonFileStore`` keeps the same key space on disk.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from sareestage.config import logger
from sareestage.core.errors import PersistenceError


class Store(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store with an optional quota on the total stored bytes."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            pending = dict(self._data)
            pending[key] = value
            used = sum(len(k) + len(v) for k, v in pending.items())
            if used > self.quota_bytes:
                logger.warning(
                    "Store quota exceeded", extra={"key": key, "quota": self.quota_bytes}
                )
                raise PersistenceError()
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store that keeps every key in one JSON document."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to read store file {self.path}: {exc}")
            raise PersistenceError() from exc

        if not isinstance(data, dict):
            logger.error(f"Store file {self.path} does not hold a JSON object")
            raise PersistenceError()
        return data

    def _save(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error(f"Failed to write store file {self.path}: {exc}")
            raise PersistenceError() from exc

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


__all__ = ["Store", "MemoryStore", "JsonFileStore"]
