from __future__ import annotations

import json
import threading

import pytest

from gkv.exceptions import BackendError, KeyNotFoundError, ValidationError
from gkv.schema import PydanticValidator
from gkv.store import GKV, DeleteResult, Entry, default_blob_path
from tests.fakes import Person, Profile, RecordingStorage


def _store(storage, **kwargs) -> GKV:
    return GKV(bucket="test-bucket", storage=storage, **kwargs)


def test_defaults(local_storage):
    store = _store(local_storage)
    assert store.namespace == "default"
    assert store.blob_path("user") == "default/user.json"
    assert default_blob_path("ns", "k") == "ns/k.json"


def test_custom_namespace_and_blob_path(local_storage):
    store = _store(
        local_storage,
        namespace="custom",
        get_blob_path=lambda namespace, key: f"custom/{namespace}/{key}",
    )
    assert store.namespace == "custom"
    assert store.blob_path("key") == "custom/custom/key"


@pytest.mark.asyncio()
async def test_set_then_get_round_trip(local_storage):
    store = _store(local_storage)
    value = {"name": "Ann", "tags": ["a", "b"], "nested": {"x": 1.5, "ok": True, "none": None}}

    written = await store.set("u1", value)
    fetched = await store.get("u1")

    assert written == Entry(key="u1", value=value)
    assert fetched.found
    assert fetched.value == value


@pytest.mark.asyncio()
async def test_set_writes_json_blob_at_blob_path(local_storage):
    store = _store(local_storage, namespace="tenant")
    await store.set("k", {"a": 1})

    raw = local_storage.get_bytes("test-bucket", "tenant/k.json")
    assert json.loads(raw) == {"a": 1}


@pytest.mark.asyncio()
async def test_get_missing_key_is_tagged_not_found(local_storage):
    store = _store(local_storage)
    entry = await store.get("missing")
    assert entry == Entry.missing("missing")
    assert entry.found is False
    assert entry.value is None


@pytest.mark.asyncio()
async def test_namespaces_are_isolated(local_storage):
    first = _store(local_storage, namespace="one")
    second = _store(local_storage, namespace="two")
    await first.set("k", 1)

    assert (await first.get("k")).value == 1
    assert not (await second.get("k")).found


@pytest.mark.asyncio()
async def test_update_deep_merges_and_persists(local_storage):
    store = _store(local_storage)
    await store.set("u1", {"name": "Ann", "age": 30, "address": {"city": "Oslo", "zip": "0150"}})

    result = await store.update("u1", {"age": 31, "address": {"zip": "0151"}})

    expected = {"name": "Ann", "age": 31, "address": {"city": "Oslo", "zip": "0151"}}
    assert result.value == expected
    assert (await store.get("u1")).value == expected


@pytest.mark.asyncio()
async def test_update_replaces_arrays(local_storage):
    store = _store(local_storage)
    await store.set("k", {"items": [1, 2, 3]})
    result = await store.update("k", {"items": [4]})
    assert result.value == {"items": [4]}


@pytest.mark.asyncio()
async def test_update_missing_key_raises_and_writes_nothing(recording_storage):
    store = _store(recording_storage)

    with pytest.raises(KeyNotFoundError, match="Value does not exist for key ghost"):
        await store.update("ghost", {"a": 1})

    assert [call[0] for call in recording_storage.calls] == ["get"]
    assert not (await store.get("ghost")).found


@pytest.mark.asyncio()
async def test_delete_then_get_not_found(local_storage):
    store = _store(local_storage)
    await store.set("k", {"a": 1})

    result = await store.delete("k")

    assert result == DeleteResult(key="k", status="deleted")
    assert result.as_dict() == {"status": "deleted", "key": "k"}
    assert not (await store.get("k")).found


@pytest.mark.asyncio()
async def test_delete_missing_key_is_idempotent(local_storage):
    store = _store(local_storage)
    assert (await store.delete("never-set")).status == "deleted"


@pytest.mark.asyncio()
async def test_set_with_validator_normalizes_value(local_storage):
    store = _store(local_storage, validator=PydanticValidator(Person))
    entry = await store.set("p", {"name": "Ann", "age": "30"})
    assert entry.value == {"name": "Ann", "age": 30}
    assert (await store.get("p")).value == {"name": "Ann", "age": 30}


@pytest.mark.asyncio()
async def test_set_with_invalid_value_raises_before_storage(recording_storage):
    store = _store(recording_storage, validator=PydanticValidator(Person))

    with pytest.raises(ValidationError) as excinfo:
        await store.set("p", {"name": "Ann"})

    assert excinfo.value.issues
    assert excinfo.value.issues[0]["path"] == ["age"]
    assert recording_storage.calls == []


@pytest.mark.asyncio()
async def test_update_with_invalid_value_raises_before_storage(recording_storage):
    store = _store(recording_storage, validator=PydanticValidator(Person))
    with pytest.raises(ValidationError):
        await store.update("p", {"age": "not a number"})
    assert recording_storage.calls == []


@pytest.mark.asyncio()
async def test_backend_failure_is_logged_and_raised(local_storage, entry_log):
    storage = RecordingStorage(local_storage, fail_on={"get"})
    store = _store(storage, log=entry_log)

    with pytest.raises(BackendError) as excinfo:
        await store.get("k")

    assert excinfo.value.details["operation"] == "get"
    assert entry_log.entries == [("ERROR", "simulated get failure")]


@pytest.mark.asyncio()
async def test_write_and_delete_failures_raise_backend_error(local_storage, entry_log):
    storage = RecordingStorage(local_storage, fail_on={"put", "delete"})
    store = _store(storage, log=entry_log)

    with pytest.raises(BackendError):
        await store.set("k", {"a": 1})
    with pytest.raises(BackendError):
        await store.delete("k")

    assert [severity for severity, _ in entry_log.entries] == ["ERROR", "ERROR"]


@pytest.mark.asyncio()
async def test_corrupt_blob_raises_backend_error(local_storage):
    local_storage.put_bytes("test-bucket", "default/bad.json", b"{not json")
    store = _store(local_storage)
    with pytest.raises(BackendError):
        await store.get("bad")


@pytest.mark.asyncio()
async def test_failing_entry_log_does_not_mask_backend_error(local_storage):
    class BrokenLog:
        def write(self, severity: str, message: str) -> None:
            raise RuntimeError("log unavailable")

    storage = RecordingStorage(local_storage, fail_on={"put"})
    store = _store(storage, log=BrokenLog())
    with pytest.raises(BackendError):
        await store.set("k", 1)


@pytest.mark.asyncio()
async def test_update_with_validator_keeps_fields_missing_from_patch(local_storage):
    store = _store(local_storage, validator=PydanticValidator(Profile))
    await store.set("p", {"name": "Ann", "email": "ann@example.com"})

    result = await store.update("p", {"name": "Bea"})

    assert result.value == {"name": "Bea", "email": "ann@example.com"}
    assert (await store.get("p")).value == {"name": "Bea", "email": "ann@example.com"}


@pytest.mark.asyncio()
@pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
async def test_non_finite_numbers_are_rejected_before_storage(recording_storage, number):
    store = _store(recording_storage)

    with pytest.raises(ValidationError):
        await store.set("k", {"x": number})

    assert recording_storage.calls == []


@pytest.mark.asyncio()
async def test_entry_log_is_written_off_the_event_loop(local_storage):
    class ThreadRecordingLog:
        def __init__(self) -> None:
            self.threads: list[int] = []

        def write(self, severity: str, message: str) -> None:
            self.threads.append(threading.get_ident())

    log = ThreadRecordingLog()
    store = _store(RecordingStorage(local_storage, fail_on={"get"}), log=log)

    with pytest.raises(BackendError):
        await store.get("k")

    assert len(log.threads) == 1
    assert log.threads[0] != threading.get_ident()
