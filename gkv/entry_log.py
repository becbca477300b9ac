"""Optional structured entry logs written alongside loguru output."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol


class EntryLog(Protocol):
    def write(self, severity: str, message: str) -> None:
        ...


class JsonLinesEntryLog:
    """Append ``{timestamp, severity, message}`` records to a JSON-lines file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def write(self, severity: str, message: str) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": severity,
            "message": message,
        }
        line = json.dumps(record, ensure_ascii=False)
        with self._lock, self.path.open("a", encoding="utf-8") as fp:
            fp.write(line + "\n")


__all__ = ["EntryLog", "JsonLinesEntryLog"]
