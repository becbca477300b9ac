"""Shared utilities for API routes."""

from __future__ import annotations

import importlib
from typing import Any

from fastapi import Request

from gkv.entry_log import EntryLog, JsonLinesEntryLog
from gkv.exceptions import ConfigurationError
from gkv.schema import PydanticValidator, ValueValidator
from gkv.settings import DEFAULT_NAMESPACE, Settings
from gkv.store import GKV
from gkv.storage import ObjectStorage


class StoreFactory:
    """Builds ``GKV`` instances sharing one backend and configuration."""

    def __init__(
        self,
        *,
        bucket: str,
        storage: ObjectStorage,
        namespace: str = DEFAULT_NAMESPACE,
        validator: ValueValidator | None = None,
        log: EntryLog | None = None,
    ) -> None:
        self.bucket = bucket
        self.storage = storage
        self.namespace = namespace
        self.validator = validator
        self.log = log
        self._default = self._build(namespace)

    def _build(self, namespace: str) -> GKV:
        return GKV(
            bucket=self.bucket,
            storage=self.storage,
            namespace=namespace,
            validator=self.validator,
            log=self.log,
        )

    def for_namespace(self, namespace: str | None = None) -> GKV:
        if not namespace or namespace == self.namespace:
            return self._default
        return self._build(namespace)


def parse_namespace(path: str) -> str:
    """Return the first path segment, or the default namespace."""
    segments = [segment for segment in (path or "").split("/") if segment]
    return segments[0] if segments else DEFAULT_NAMESPACE


def load_value_validator(reference: str | None) -> ValueValidator | None:
    """Resolve ``"package.module:Name"`` into a pydantic validator."""
    if not reference:
        return None
    module_name, _, attr = reference.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(
            f"Invalid value schema reference '{reference}': expected 'package.module:Name'",
            {"value_schema": reference},
        )
    try:
        schema: Any = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(
            f"Cannot import value schema '{reference}': {exc}", {"value_schema": reference}
        ) from exc
    return PydanticValidator(schema)


def build_store_factory(settings: Settings, storage: ObjectStorage) -> StoreFactory:
    log = JsonLinesEntryLog(settings.kv.entry_log) if settings.kv.entry_log else None
    return StoreFactory(
        bucket=settings.storage.bucket,
        storage=storage,
        namespace=settings.kv.namespace,
        validator=load_value_validator(settings.kv.value_schema),
        log=log,
    )


def get_store_factory(request: Request) -> StoreFactory:
    return request.app.state.store_factory
