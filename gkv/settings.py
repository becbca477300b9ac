from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from gkv.exceptions import ConfigurationError

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


DEFAULT_BUCKET = "gkv-test"
DEFAULT_NAMESPACE = "default"
DEFAULT_CONFIG_PATH = Path("config/default.yaml")

_TRUTHY = {"true", "1", "yes"}


class StorageSettings(BaseModel):
    backend: Literal["s3", "local"] = "s3"
    bucket: str = DEFAULT_BUCKET
    prefix: str = ""
    region: str | None = None
    endpoint_url: str | None = None
    local_root: Path = Path("data/buckets")

    @field_validator("bucket")
    @classmethod
    def _non_empty_bucket(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("bucket must not be empty")
        return value


class KVSettings(BaseModel):
    namespace: str = DEFAULT_NAMESPACE
    # JSON-lines file receiving ERROR entries next to the regular log output
    entry_log: Path | None = None
    # "package.module:Model" resolved to a pydantic-validated schema
    value_schema: str | None = None

    @field_validator("namespace")
    @classmethod
    def _normalize_namespace(cls, value: str) -> str:
        value = value.strip().strip("/")
        return value or DEFAULT_NAMESPACE


class HTTPSettings(BaseModel):
    namespace_from_path: bool = False


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    kv: KVSettings = Field(default_factory=KVSettings)
    http: HTTPSettings = Field(default_factory=HTTPSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from an optional YAML file and the environment.

        Args:
            path: Optional path to configuration file. If not provided, uses
                the GKV_CONFIG environment variable or config/default.yaml when
                that file exists. Without any file only defaults and
                environment overrides apply.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            ConfigurationError: If an explicit file is missing or the
                resulting configuration is invalid.
        """
        explicit = path or (Path(os.environ["GKV_CONFIG"]) if os.getenv("GKV_CONFIG") else None)
        payload: dict[str, Any] = {}
        if explicit is not None:
            if not explicit.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {explicit}", {"path": str(explicit)}
                )
            payload = _read_yaml(explicit)
        elif DEFAULT_CONFIG_PATH.exists():
            payload = _read_yaml(DEFAULT_CONFIG_PATH)

        _apply_env_overrides(payload)
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fp:
        payload = yaml.safe_load(fp) or {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}", {"path": str(path)})
    return payload


_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "GKV_STORAGE_BACKEND": ("storage", "backend"),
    "GKV_BUCKET_NAME": ("storage", "bucket"),
    "GKV_S3_PREFIX": ("storage", "prefix"),
    "GKV_S3_REGION": ("storage", "region"),
    "GKV_S3_ENDPOINT_URL": ("storage", "endpoint_url"),
    "GKV_LOCAL_ROOT": ("storage", "local_root"),
    "GKV_NAMESPACE": ("kv", "namespace"),
    "GKV_ENTRY_LOG": ("kv", "entry_log"),
    "GKV_VALUE_SCHEMA": ("kv", "value_schema"),
}


def _section(payload: dict[str, Any], name: str) -> dict[str, Any]:
    section = payload.get(name) or {}
    payload[name] = section
    return section


def _apply_env_overrides(payload: dict[str, Any]) -> None:
    for env_name, (section, field) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            _section(payload, section)[field] = value

    from_path = os.getenv("GKV_NAMESPACE_FROM_PATH")
    if from_path:
        _section(payload, "http")["namespace_from_path"] = from_path.strip().lower() in _TRUTHY


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "DEFAULT_BUCKET",
    "DEFAULT_NAMESPACE",
    "Settings",
    "StorageSettings",
    "KVSettings",
    "HTTPSettings",
    "get_settings",
]
