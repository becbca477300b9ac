"""Storage abstraction (S3/MinIO or local filesystem fallback)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gkv.settings import StorageSettings


class ObjectStorage(Protocol):
    """Object store addressed by (bucket, key).

    Backends raise ``ObjectNotFoundError`` for a missing object and
    ``StorageError`` for every other failure.
    """

    def get_bytes(self, bucket: str, key: str) -> bytes:
        ...

    def put_bytes(self, bucket: str, key: str, data: bytes) -> str:  # returns uri
        ...

    def delete(self, bucket: str, key: str) -> None:
        ...


def create_storage(settings: "StorageSettings") -> ObjectStorage:
    """Build the backend selected by ``settings.backend``."""
    if settings.backend == "local":
        from gkv.storage.local import LocalStorage

        return LocalStorage(settings.local_root)

    from gkv.storage.s3 import S3Storage

    return S3Storage(
        prefix=settings.prefix,
        region=settings.region,
        endpoint_url=settings.endpoint_url,
    )


__all__ = ["ObjectStorage", "create_storage"]
