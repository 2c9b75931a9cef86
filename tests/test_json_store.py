"""Tests for JsonFileStore and JsonLedgerRepository."""

import asyncio
import json

import pytest

from numbers_lottery.errors import StorageCorruptedError
from numbers_lottery.schemas.lottery import Ledger
from numbers_lottery.storage import json_store
from numbers_lottery.storage.json_store import JsonFileStore
from numbers_lottery.storage.repository import JsonLedgerRepository


SAMPLE = {
    "draws": [
        {"id": "d1", "numbers": [3, 8, 19, 27, 33, 44], "date": "2026-01-01T12:00:00Z"},
    ],
    "tickets": [
        {
            "id": "t1",
            "userId": "alice",
            "numbers": [3, 12, 19, 27, 41, 49],
            "drawId": "d1",
            "purchasedAt": "2026-01-01T11:00:00Z",
        },
        {
            "id": "t2",
            "userId": "bob",
            "numbers": [1, 2, 3, 4, 5, 6],
            "drawId": None,
            "purchasedAt": "2026-01-01T12:30:00Z",
        },
    ],
}


@pytest.mark.asyncio
async def test_missing_file_loads_as_none(tmp_path):
    assert await JsonFileStore().load(tmp_path / "nope.json") is None


@pytest.mark.asyncio
async def test_save_creates_directory_and_indents(tmp_path):
    path = tmp_path / "a" / "b" / "doc.json"
    await JsonFileStore().save(path, {"draws": [], "tickets": []})

    text = path.read_text(encoding="utf-8")
    assert text == '{\n  "draws": [],\n  "tickets": []\n}'


@pytest.mark.asyncio
async def test_save_overwrites(tmp_path):
    path = tmp_path / "doc.json"
    store = JsonFileStore()
    await store.save(path, {"value": "x" * 100})
    await store.save(path, {"value": 1})
    assert json.loads(path.read_text(encoding="utf-8")) == {"value": 1}


@pytest.mark.asyncio
@pytest.mark.parametrize("policy", ["reset", "backup", "fail"])
async def test_load_during_save_sees_old_document(tmp_path, slow_writes, policy):
    path = tmp_path / "doc.json"
    store = JsonFileStore(policy)
    await store.save(path, {"version": 1})

    write = asyncio.create_task(store.save(path, {"version": 2}))
    await asyncio.sleep(0.02)
    seen = await store.load(path)
    await write

    assert seen == {"version": 1}
    assert await store.load(path) == {"version": 2}
    assert [p.name for p in tmp_path.iterdir()] == ["doc.json"]


@pytest.mark.asyncio
async def test_failed_save_keeps_old_document(tmp_path, monkeypatch):
    path = tmp_path / "doc.json"
    store = JsonFileStore()
    await store.save(path, {"version": 1})

    async def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(json_store.aiofiles.os, "replace", broken_replace)
    with pytest.raises(OSError, match="disk full"):
        await store.save(path, {"version": 2})

    assert json.loads(path.read_text(encoding="utf-8")) == {"version": 1}
    assert [p.name for p in tmp_path.iterdir()] == ["doc.json"]


@pytest.mark.asyncio
async def test_corrupt_file_reset_policy(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{not json", encoding="utf-8")

    assert await JsonFileStore("reset").load(path) is None
    assert path.exists()


@pytest.mark.asyncio
async def test_invalid_utf8_counts_as_corrupt(tmp_path):
    path = tmp_path / "doc.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    assert await JsonFileStore("reset").load(path) is None


@pytest.mark.asyncio
async def test_corrupt_file_backup_policy(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{not json", encoding="utf-8")

    assert await JsonFileStore("backup").load(path) is None
    assert not path.exists()
    backups = list(tmp_path.glob("doc.json.corrupt-*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == "{not json"


@pytest.mark.asyncio
async def test_corrupt_file_fail_policy(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageCorruptedError):
        await JsonFileStore("fail").load(path)


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        JsonFileStore("ignore")


@pytest.mark.asyncio
async def test_other_io_errors_propagate(tmp_path):
    # a directory where the file should be
    with pytest.raises(IsADirectoryError):
        await JsonFileStore().load(tmp_path)


@pytest.mark.asyncio
async def test_repository_round_trip(tmp_path):
    path = tmp_path / "lottery.json"
    path.write_text(json.dumps(SAMPLE), encoding="utf-8")
    repo = JsonLedgerRepository(path)

    ledger = await repo.load()
    await repo.save(ledger)
    reloaded = await repo.load()

    assert reloaded == ledger
    assert [t.id for t in reloaded.tickets] == ["t1", "t2"]
    assert reloaded.tickets[1].draw_id is None

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert set(on_disk["tickets"][0]) == {"id", "userId", "numbers", "drawId", "purchasedAt"}
    assert on_disk["tickets"][1]["drawId"] is None


@pytest.mark.asyncio
async def test_repository_missing_file_is_empty_ledger(tmp_path):
    ledger = await JsonLedgerRepository(tmp_path / "lottery.json").load()
    assert ledger == Ledger()


@pytest.mark.asyncio
async def test_repository_treats_wrong_shape_as_corrupt(tmp_path):
    path = tmp_path / "lottery.json"
    path.write_text(json.dumps({"draws": [{"id": "d1", "numbers": [1, 1, 1]}]}), encoding="utf-8")

    ledger = await JsonLedgerRepository(path, JsonFileStore("reset")).load()
    assert ledger == Ledger()

    with pytest.raises(StorageCorruptedError):
        await JsonLedgerRepository(path, JsonFileStore("fail")).load()
