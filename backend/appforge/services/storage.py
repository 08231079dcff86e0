"""Durable key/value storage backends for wizard and plan state.

All backends expose the same three calls over string values, mirroring
browser local storage:

    get(key) -> str | None
    set(key, value)
    remove(key)

Backends raise on failure; the stores decide how to recover (they log and
fall back, a broken cache must never block the wizard).
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

import redis
from sqlalchemy import Engine, delete, select

from appforge.config import Settings
from appforge.database import create_tables, make_engine, make_session_factory
from appforge.models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)


class WizardStorage(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...


class MemoryStorage(WizardStorage):
    """Process-local storage. Used for tests and the ``memory`` backend."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage(WizardStorage):
    """One JSON file per key inside ``directory`` (created on first write)."""

    _SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{self._SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # Write-then-rename so a crash mid-write leaves the old value intact
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SqlStorage(WizardStorage):
    """Key/value rows in the ``wizard_storage`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = make_session_factory(engine)
        create_tables(engine)

    def get(self, key: str) -> str | None:
        with self.session_factory() as session:
            return session.execute(
                select(StorageEntry.value).where(StorageEntry.key == key)
            ).scalar_one_or_none()

    def set(self, key: str, value: str) -> None:
        with self.session_factory.begin() as session:
            entry = session.get(StorageEntry, key)
            if entry:
                entry.value = value
            else:
                session.add(StorageEntry(key=key, value=value))

    def remove(self, key: str) -> None:
        with self.session_factory.begin() as session:
            session.execute(delete(StorageEntry).where(StorageEntry.key == key))


class RedisStorage(WizardStorage):
    """Plain string keys in Redis (no TTL, state must survive restarts)."""

    def __init__(self, client: redis.Redis, prefix: str = "appforge"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> str | None:
        value = self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.client.delete(self._key(key))


def build_storage(settings: Settings) -> WizardStorage:
    """Create the storage backend named by ``settings.storage_backend``."""
    backend = settings.storage_backend.lower()
    if backend == "file":
        storage = FileStorage(settings.storage_dir)
    elif backend == "sql":
        storage = SqlStorage(make_engine(settings.database_url, echo=False))
    elif backend == "redis":
        storage = RedisStorage(
            redis.Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
        )
    elif backend == "memory":
        storage = MemoryStorage()
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")

    logger.info(f"Using {type(storage).__name__} for wizard persistence")
    return storage
