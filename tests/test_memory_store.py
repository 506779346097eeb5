from __future__ import annotations

import asyncio

import pytest

from pinsnap.stores.errors import BlobNotFoundError
from pinsnap.stores.memory import InMemoryBlobStore


def test_content_id_is_derived_from_bytes() -> None:
    store = InMemoryBlobStore()

    first = asyncio.run(store.upload(b"same", {"name": "one"}))
    second = asyncio.run(store.upload(b"same", {"name": "two"}))
    other = asyncio.run(store.upload(b"different"))

    assert first == second
    assert first != other
    assert asyncio.run(store.fetch(first)) == b"same"


def test_unpinned_blobs_survive_until_collected() -> None:
    store = InMemoryBlobStore()
    content_id = asyncio.run(store.upload(b"old"))
    keep_id = asyncio.run(store.upload(b"new"))

    asyncio.run(store.unpin(content_id))
    assert asyncio.run(store.fetch(content_id)) == b"old"

    assert store.collect_garbage() == 1
    with pytest.raises(BlobNotFoundError):
        asyncio.run(store.fetch(content_id))
    assert asyncio.run(store.fetch(keep_id)) == b"new"
