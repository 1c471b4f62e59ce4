"""
Key-value storage adapters.

Every backend stores string blobs under string keys, the same contract the
browser local storage offers. The project repository only ever talks to this
interface, so tests can swap in MemoryStorage.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from sqlalchemy import delete, select

from portfolio.core.config import Settings, get_settings
from portfolio.db.models import StorageEntry
from portfolio.db.session import create_tables, get_session

logger = logging.getLogger(__name__)

PROJECTS_KEY = "portfolioProjects"
LAST_UPDATE_KEY = "lastUpdate"
LAST_UPDATE_CHECK_KEY = "lastUpdateCheck"


class StorageAdapter(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryStorage:
    """Dict-backed storage, lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage:
    """
    One JSON document on disk mapping key -> string value.

    The file is re-read on every access so that scripts and the web app see
    each other's writes; the last writer wins.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError
            logger.error("Storage file %s is not valid UTF-8 JSON; treating it as empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.error("Storage file %s does not hold a JSON object; treating it as empty", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self) -> list[str]:
        return list(self._load())


class SQLStorage:
    """Key-value rows in the storage_entries table."""

    def __init__(self, *, ensure_schema: bool = True) -> None:
        if ensure_schema:
            create_tables()

    def get(self, key: str) -> Optional[str]:
        with get_session() as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        with get_session() as session:
            entry = session.get(StorageEntry, key)
            if not entry:
                session.add(StorageEntry(key=key, value=str(value), updated_at=now))
            else:
                entry.value = str(value)
                entry.updated_at = now
            session.commit()

    def remove(self, key: str) -> None:
        with get_session() as session:
            session.execute(delete(StorageEntry).where(StorageEntry.key == key))
            session.commit()

    def keys(self) -> list[str]:
        with get_session() as session:
            return list(session.execute(select(StorageEntry.key)).scalars().all())


def build_storage(settings: Settings | None = None) -> StorageAdapter:
    """Pick the backend named by STORAGE_BACKEND."""
    settings = settings or get_settings()
    backend = settings.storage_backend
    if backend == "memory":
        return MemoryStorage()
    if backend == "sql":
        return SQLStorage()
    if backend != "json":
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}' (expected json, memory or sql)")
    return JsonFileStorage(settings.storage_path)
