"""JSON key-value store on top of an object-storage bucket.

Every key lives in its own JSON blob at ``get_blob_path(namespace, key)``.
The store keeps no state besides its configuration; durability and
consistency come from the backend. ``update`` is a read-merge-write sequence
without any locking, so concurrent updates of one key can lose writes.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Callable, Literal

from loguru import logger

from gkv.entry_log import EntryLog
from gkv.exceptions import (
    BackendError,
    KeyNotFoundError,
    ObjectNotFoundError,
    StorageError,
    ValidationError,
)
from gkv.merge import deep_merge
from gkv.schema import ValueValidator, ensure_valid
from gkv.settings import DEFAULT_NAMESPACE
from gkv.storage import ObjectStorage

BlobPathFn = Callable[[str, str], str]


def default_blob_path(namespace: str, key: str) -> str:
    return f"{namespace}/{key}.json"


@dataclass(frozen=True)
class Entry:
    key: str
    value: Any = None
    found: bool = True

    @classmethod
    def missing(cls, key: str) -> "Entry":
        return cls(key=key, value=None, found=False)

    def as_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class DeleteResult:
    key: str
    status: Literal["deleted"] = "deleted"

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status, "key": self.key}


class GKV:
    """Key-value access to JSON blobs in one bucket namespace.

    Args:
        bucket: Bucket holding the blobs.
        storage: Object storage backend.
        namespace: Directory-like prefix isolating this store's keys.
        get_blob_path: Maps ``(namespace, key)`` to an object path. Must be
            deterministic and collision-free; not checked here.
        validator: Optional validator applied to values on ``set``/``update``.
        log: Optional entry log receiving ERROR entries for backend failures.
    """

    def __init__(
        self,
        *,
        bucket: str,
        storage: ObjectStorage,
        namespace: str | None = None,
        get_blob_path: BlobPathFn | None = None,
        validator: ValueValidator | None = None,
        log: EntryLog | None = None,
    ) -> None:
        self.bucket = bucket
        self.storage = storage
        self.namespace = namespace or DEFAULT_NAMESPACE
        self.get_blob_path = get_blob_path or default_blob_path
        self.validator = validator
        self.log = log

    def blob_path(self, key: str) -> str:
        return self.get_blob_path(self.namespace, key)

    async def get(self, key: str) -> Entry:
        """Fetch a value. Missing keys yield ``Entry(found=False)``."""
        path = self.blob_path(key)
        try:
            content = await asyncio.to_thread(self.storage.get_bytes, self.bucket, path)
        except ObjectNotFoundError:
            return Entry.missing(key)
        except StorageError as exc:
            raise await self._backend_error("get", key, exc) from exc

        try:
            value = json.loads(content)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise await self._backend_error("get", key, exc) from exc
        return Entry(key=key, value=value)

    async def set(self, key: str, value: Any) -> Entry:
        """Store a new value, overwriting whatever was there."""
        value = ensure_valid(self.validator, value)
        await self._write(key, value, operation="set")
        return Entry(key=key, value=value)

    async def update(self, key: str, value: Any) -> Entry:
        """Deep-merge ``value`` into the stored value.

        Raises:
            KeyNotFoundError: If nothing is stored under ``key``.
        """
        # Validation only gates the patch; the raw patch is merged.
        ensure_valid(self.validator, value)
        current = await self.get(key)
        if not current.found:
            raise KeyNotFoundError(
                f"Value does not exist for key {key}",
                {"key": key, "namespace": self.namespace},
            )

        merged = deep_merge(current.value, value)
        await self._write(key, merged, operation="update")
        return Entry(key=key, value=merged)

    async def delete(self, key: str) -> DeleteResult:
        """Remove a key. Deleting a missing key succeeds."""
        path = self.blob_path(key)
        try:
            await asyncio.to_thread(self.storage.delete, self.bucket, path)
        except ObjectNotFoundError:
            logger.debug("Delete of missing blob {path}", path=path)
        except StorageError as exc:
            raise await self._backend_error("delete", key, exc) from exc
        return DeleteResult(key=key)

    async def _write(self, key: str, value: Any, *, operation: str) -> None:
        path = self.blob_path(key)
        try:
            payload = json.dumps(value, ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"Value is not JSON-serializable: {exc}",
                {"key": key, "operation": operation},
                issues=[{"message": str(exc), "path": []}],
            ) from exc
        try:
            await asyncio.to_thread(self.storage.put_bytes, self.bucket, path, payload)
        except StorageError as exc:
            raise await self._backend_error(operation, key, exc) from exc

    async def _backend_error(self, operation: str, key: str, exc: Exception) -> BackendError:
        message = str(exc) or "GKV: unknown error"
        logger.error(
            "GKV {operation} failed for {bucket}/{path}: {message}",
            operation=operation,
            bucket=self.bucket,
            path=self.blob_path(key),
            message=message,
        )
        if self.log is not None:
            try:
                await asyncio.to_thread(self.log.write, "ERROR", message)
            except Exception as log_exc:
                logger.warning("Entry log write failed: {error}", error=log_exc)
        return BackendError(
            message,
            {"operation": operation, "key": key, "namespace": self.namespace},
        )


__all__ = ["GKV", "Entry", "DeleteResult", "BlobPathFn", "default_blob_path"]
