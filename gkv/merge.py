"""Deep merge over JSON values.

Mappings are merged key by key, recursively. For any other pair of values
the patch side wins: arrays are replaced wholesale and never concatenated,
scalars (including ``None``) replace whatever was stored.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_merge(base: Any, patch: Any) -> Any:
    """Return ``patch`` merged onto ``base`` without mutating either."""
    if not isinstance(base, Mapping) or not isinstance(patch, Mapping):
        return _copy(patch)

    merged: dict[str, Any] = {key: _copy(value) for key, value in base.items()}
    for key, value in patch.items():
        if key in merged:
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = _copy(value)
    return merged


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_copy(item) for item in value]
    return value


__all__ = ["deep_merge"]
