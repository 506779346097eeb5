from __future__ import annotations

import asyncio
import hashlib
from typing import Any, Optional

from pinsnap.snapshot.models import ContentId, PointerRecord, utc_now
from pinsnap.stores.errors import BlobNotFoundError


class InMemoryBlobStore:
    """sha256-addressed blob store kept in process memory.

    Unpinned blobs stay fetchable until ``collect_garbage`` runs, mirroring a
    pinning service that only drops unpinned content eventually.
    """

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.metadata: dict[str, dict[str, Any]] = {}
        self.pinned: set[str] = set()
        self.unpinned: list[str] = []

    async def upload(self, data: bytes, metadata: Optional[dict[str, Any]] = None) -> ContentId:
        content_id = ContentId(f"sha256-{hashlib.sha256(data).hexdigest()}")
        self.blobs[content_id] = bytes(data)
        self.metadata[content_id] = dict(metadata or {})
        self.pinned.add(content_id)
        return content_id

    async def fetch(self, content_id: ContentId) -> bytes:
        try:
            return self.blobs[content_id]
        except KeyError:
            raise BlobNotFoundError(f"Unknown content id: {content_id}") from None

    async def unpin(self, content_id: ContentId) -> None:
        self.pinned.discard(content_id)
        self.unpinned.append(content_id)

    def collect_garbage(self) -> int:
        stale = [content_id for content_id in self.blobs if content_id not in self.pinned]
        for content_id in stale:
            self.blobs.pop(content_id, None)
            self.metadata.pop(content_id, None)
        return len(stale)


class InMemoryPointerRegistry:
    def __init__(self) -> None:
        self.records: dict[str, PointerRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, workspace_id: str) -> Optional[ContentId]:
        async with self._lock:
            record = self.records.get(workspace_id)
            return ContentId(record.current_content_id) if record else None

    async def set(self, workspace_id: str, content_id: ContentId) -> PointerRecord:
        async with self._lock:
            record = PointerRecord(
                workspace_id=workspace_id,
                current_content_id=content_id,
                updated_at=utc_now(),
            )
            self.records[workspace_id] = record
            return record
