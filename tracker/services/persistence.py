"""Key-value persistence backends and versioned state envelopes."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

import redis

from tracker.core.config import Settings, StorageBackend
from tracker.core.errors import StorageError
from tracker.core.logging import get_logger

logger = get_logger(__name__)

Migration = Callable[[dict[str, Any]], dict[str, Any]]


class StateStorage(Protocol):
    """String key-value store holding one serialized document per key."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStateStorage:
    """Process-local storage, used for tests and ephemeral sessions."""

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStateStorage:
    """One JSON document per key inside `directory`, replaced atomically."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove {path}: {exc}") from exc


def _redis_client(redis_url: str) -> redis.Redis:
    return redis.Redis.from_url(redis_url)


class RedisStateStorage:
    """Redis-backed storage; keys are prefixed with `<namespace>:`."""

    def __init__(self, redis_url: str, *, namespace: str = "tracker") -> None:
        self.namespace = namespace
        self._client = _redis_client(redis_url)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get_item(self, key: str) -> str | None:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise StorageError(f"Failed to read {self._key(key)}: {exc}") from exc
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    def set_item(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError as exc:
            raise StorageError(f"Failed to write {self._key(key)}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            raise StorageError(f"Failed to remove {self._key(key)}: {exc}") from exc


def build_state_storage(settings: Settings) -> StateStorage:
    """Construct the storage backend selected by configuration."""
    if settings.storage_backend == StorageBackend.REDIS:
        return RedisStateStorage(settings.redis_url, namespace=settings.storage_namespace)
    if settings.storage_backend == StorageBackend.FILE:
        return FileStateStorage(settings.storage_dir)
    return MemoryStateStorage()


class PersistedSlot:
    """Versioned `{"state": ..., "version": N}` document under one storage key.

    `migrations[n]` upgrades a state stored at version n to version n + 1.
    """

    def __init__(
        self,
        storage: StateStorage,
        key: str,
        *,
        version: int = 0,
        migrations: Mapping[int, Migration] | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self.version = version
        self.migrations = dict(migrations or {})

    def load(self) -> dict[str, Any] | None:
        """Return the stored state upgraded to the current version, if usable."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            return None
        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("persistence.slot.unreadable", extra={"key": self.key})
            return None
        if not isinstance(envelope, dict) or not isinstance(envelope.get("state"), dict):
            logger.warning("persistence.slot.malformed", extra={"key": self.key})
            return None

        state: dict[str, Any] = envelope["state"]
        stored_version = envelope.get("version", 0)
        if isinstance(stored_version, bool) or not isinstance(stored_version, int):
            logger.warning("persistence.slot.malformed", extra={"key": self.key})
            return None
        if stored_version > self.version:
            logger.warning(
                "persistence.slot.version_too_new",
                extra={"key": self.key, "stored": stored_version, "current": self.version},
            )
            return None
        while stored_version < self.version:
            step = self.migrations.get(stored_version)
            if step is None:
                logger.warning(
                    "persistence.slot.migration_missing",
                    extra={"key": self.key, "from_version": stored_version},
                )
                return None
            try:
                state = step(state)
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning(
                    "persistence.slot.migration_failed",
                    extra={"key": self.key, "from_version": stored_version, "error": str(exc)},
                )
                return None
            stored_version += 1
            logger.info(
                "persistence.slot.migrated",
                extra={"key": self.key, "to_version": stored_version},
            )
        return state

    def save(self, state: Mapping[str, Any]) -> None:
        document = json.dumps(
            {"state": state, "version": self.version},
            ensure_ascii=False,
            sort_keys=True,
        )
        self.storage.set_item(self.key, document)

    def clear(self) -> None:
        self.storage.remove_item(self.key)
