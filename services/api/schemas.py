from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, StrictStr


class KeyRequest(BaseModel):
    key: StrictStr = Field(min_length=1)


class EntryRequest(KeyRequest):
    value: Any
