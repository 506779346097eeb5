from __future__ import annotations

import asyncio
import json

import pytest

from pinsnap.stores.errors import PointerRegistryError
from pinsnap.stores.memory import InMemoryPointerRegistry
from pinsnap.stores.pointers import FilePointerRegistry


def test_memory_registry_read_after_write() -> None:
    registry = InMemoryPointerRegistry()

    async def run():
        assert await registry.get("ws") is None
        record = await registry.set("ws", "cid-1")
        return record, await registry.get("ws")

    record, current = asyncio.run(run())

    assert current == "cid-1"
    assert record.workspace_id == "ws"
    assert record.current_content_id == "cid-1"


def test_file_registry_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "state" / "pointers.json"
    first = FilePointerRegistry(path)

    asyncio.run(first.set("ws", "cid-1"))
    asyncio.run(first.set("ws", "cid-2"))
    asyncio.run(first.set("other", "cid-9"))

    second = FilePointerRegistry(path)
    assert asyncio.run(second.get("ws")) == "cid-2"
    assert asyncio.run(second.get("other")) == "cid-9"
    assert asyncio.run(second.get("missing")) is None

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["pointers"]["ws"]["current_content_id"] == "cid-2"
    assert "updated_at" in payload["pointers"]["ws"]


def test_file_registry_rejects_corrupt_file(tmp_path) -> None:
    path = tmp_path / "pointers.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PointerRegistryError):
        asyncio.run(FilePointerRegistry(path).get("ws"))


def test_file_registry_record_lookup(tmp_path) -> None:
    registry = FilePointerRegistry(tmp_path / "pointers.json")
    asyncio.run(registry.set("ws", "cid-1"))

    record = registry.get_record("ws")

    assert record is not None
    assert record.current_content_id == "cid-1"
    assert set(registry.records()) == {"ws"}
