"""GKV: JSON key-value storage on object-storage buckets."""

from gkv.exceptions import (
    BackendError,
    GKVError,
    KeyNotFoundError,
    ValidationError,
)
from gkv.merge import deep_merge
from gkv.schema import CallableValidator, PydanticValidator, ValueValidator
from gkv.store import GKV, DeleteResult, Entry, default_blob_path

__all__ = [
    "GKV",
    "Entry",
    "DeleteResult",
    "default_blob_path",
    "deep_merge",
    "ValueValidator",
    "PydanticValidator",
    "CallableValidator",
    "GKVError",
    "ValidationError",
    "KeyNotFoundError",
    "BackendError",
]
