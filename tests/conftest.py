from __future__ import annotations

from pathlib import Path

import pytest

from gkv.storage.local import LocalStorage
from tests.fakes import ListEntryLog, RecordingStorage


@pytest.fixture
def local_storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "buckets")


@pytest.fixture
def recording_storage(local_storage: LocalStorage) -> RecordingStorage:
    return RecordingStorage(local_storage)


@pytest.fixture
def entry_log() -> ListEntryLog:
    return ListEntryLog()
