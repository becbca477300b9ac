from __future__ import annotations

from pathlib import Path, PurePosixPath

from gkv.exceptions import ObjectNotFoundError, StorageError


class LocalStorage:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, bucket: str, key: str) -> Path:
        relative = PurePosixPath(bucket) / key.lstrip("/")
        if ".." in relative.parts:
            raise StorageError(f"Refusing path outside of bucket: {relative}", {"bucket": bucket, "key": key})
        return self.root / relative

    def get_bytes(self, bucket: str, key: str) -> bytes:
        path = self._path(bucket, key)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(f"No such object: {bucket}/{key}", {"bucket": bucket, "key": key}) from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {bucket}/{key}: {exc}", {"bucket": bucket, "key": key}) from exc

    def put_bytes(self, bucket: str, key: str, data: bytes) -> str:
        path = self._path(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {bucket}/{key}: {exc}", {"bucket": bucket, "key": key}) from exc
        return str(path)

    def delete(self, bucket: str, key: str) -> None:
        path = self._path(bucket, key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {bucket}/{key}: {exc}", {"bucket": bucket, "key": key}) from exc


__all__ = ["LocalStorage"]
