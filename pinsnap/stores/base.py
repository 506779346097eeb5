from __future__ import annotations

from typing import Any, Optional, Protocol

from pinsnap.snapshot.models import ContentId, PointerRecord


class BlobStore(Protocol):
    async def upload(self, data: bytes, metadata: Optional[dict[str, Any]] = None) -> ContentId:
        ...

    async def fetch(self, content_id: ContentId) -> bytes:
        ...

    async def unpin(self, content_id: ContentId) -> None:
        ...


class PointerRegistry(Protocol):
    async def get(self, workspace_id: str) -> Optional[ContentId]:
        ...

    async def set(self, workspace_id: str, content_id: ContentId) -> PointerRecord:
        ...
