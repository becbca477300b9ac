"""Custom exception hierarchy for GKV."""

from __future__ import annotations

from typing import Any


class GKVError(Exception):
    """Base exception for all GKV-specific errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GKVError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(GKVError):
    """Raised when a value or request body is rejected."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        issues: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.issues = issues or []


class NotFoundError(GKVError):
    """Base class for missing resources."""
    pass


class KeyNotFoundError(NotFoundError):
    """Raised when a key has no stored value."""
    pass


class StorageError(GKVError):
    """Raised when storage operations fail."""
    pass


class ObjectNotFoundError(StorageError):
    """Raised by storage backends when an object does not exist."""
    pass


class BackendError(GKVError):
    """Raised when the object store fails for any reason other than not-found."""
    pass


class MethodNotAllowedError(GKVError):
    """Raised when the HTTP adapter receives an unsupported method."""
    pass
