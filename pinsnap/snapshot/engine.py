from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger

from pinsnap.snapshot.app_state import AppStateProvider, NullAppStateProvider
from pinsnap.snapshot.errors import FetchFailed, PointerUpdateFailed, UploadFailed
from pinsnap.snapshot.materializer import FileMaterializer
from pinsnap.snapshot.models import CommitResult, ContentId, RestoreResult, WorkspaceSnapshot
from pinsnap.snapshot.serializer import StateSerializer

if TYPE_CHECKING:
    from pinsnap.stores.base import BlobStore, PointerRegistry


class SnapshotEngine:
    """Commits workspaces to a content-addressed blob store and restores them.

    One pointer per workspace id tracks the live snapshot. The pointer only
    moves after a successful upload; the previous blob is then unpinned on a
    best-effort basis. Callers serialize commit/restore per workspace id.
    """

    def __init__(
        self,
        blob_store: "BlobStore",
        pointers: "PointerRegistry",
        *,
        serializer: Optional[StateSerializer] = None,
        materializer: Optional[FileMaterializer] = None,
        app_state_provider: Optional[AppStateProvider] = None,
        owner: Optional[str] = None,
    ) -> None:
        self.blob_store = blob_store
        self.pointers = pointers
        self.serializer = serializer or StateSerializer()
        self.materializer = materializer or FileMaterializer()
        self.app_state_provider = app_state_provider or NullAppStateProvider()
        self.owner = owner

    async def commit(
        self,
        workspace_id: str,
        scan_root: Path | str,
        app_state_provider: Optional[AppStateProvider] = None,
    ) -> CommitResult:
        if not workspace_id:
            raise ValueError("workspace_id is required to commit")
        provider = app_state_provider or self.app_state_provider
        serialized = await asyncio.to_thread(
            self.serializer.serialize, scan_root, workspace_id, provider
        )
        snapshot = serialized.snapshot
        data = self.serializer.encode(snapshot)
        logger.info(
            f"Committing workspace {workspace_id}: {snapshot.file_count} files, "
            f"{len(snapshot.folders)} folders, {len(data)} bytes"
        )

        try:
            content_id = await self.blob_store.upload(data, self._upload_metadata(snapshot))
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Upload failed for workspace {workspace_id}: {exc}")
            raise UploadFailed(f"Upload failed for workspace {workspace_id}: {exc}") from exc

        try:
            previous = await self.pointers.get(workspace_id)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Pointer read failed for workspace {workspace_id}: {exc}")
            await self._unpin_quietly(content_id)
            raise PointerUpdateFailed(
                f"Could not read the pointer for workspace {workspace_id}: {exc}"
            ) from exc
        try:
            await self.pointers.set(workspace_id, content_id)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Pointer update failed for workspace {workspace_id}: {exc}")
            # An identical upload may share the live id; never unpin what the pointer holds.
            if content_id != previous:
                await self._unpin_quietly(content_id)
            raise PointerUpdateFailed(
                f"Could not point workspace {workspace_id} at {content_id}: {exc}"
            ) from exc

        if previous and previous != content_id:
            await self._unpin_quietly(previous)

        for diagnostic in serialized.diagnostics:
            logger.warning(f"Skipped while committing {workspace_id}: {diagnostic}")
        logger.info(f"Workspace {workspace_id} now at {content_id}")
        return CommitResult(
            content_id=content_id,
            snapshot=snapshot,
            previous_content_id=previous,
            diagnostics=list(serialized.diagnostics),
        )

    async def restore(self, content_id: ContentId, materialize_root: Path | str) -> RestoreResult:
        snapshot = await self.load(content_id)
        diagnostics = await asyncio.to_thread(
            self.materializer.materialize, snapshot, materialize_root
        )
        for diagnostic in diagnostics:
            logger.warning(f"Skipped while restoring {content_id}: {diagnostic}")
        logger.info(
            f"Restored {content_id} (workspace {snapshot.workspace_id}) into {materialize_root}: "
            f"{snapshot.file_count - len(diagnostics)} files written"
        )
        return RestoreResult(content_id=content_id, snapshot=snapshot, diagnostics=diagnostics)

    async def load(self, content_id: ContentId) -> WorkspaceSnapshot:
        """Fetch and validate a snapshot without touching the filesystem."""
        try:
            data = await self.blob_store.fetch(content_id)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Fetch failed for {content_id}: {exc}")
            raise FetchFailed(f"Could not fetch {content_id}: {exc}") from exc
        return self.serializer.decode(data)

    async def current(self, workspace_id: str) -> Optional[ContentId]:
        return await self.pointers.get(workspace_id)

    async def restore_current(self, workspace_id: str, materialize_root: Path | str) -> RestoreResult:
        content_id = await self.current(workspace_id)
        if content_id is None:
            raise FetchFailed(f"Workspace {workspace_id} has no committed snapshot")
        return await self.restore(content_id, materialize_root)

    def _upload_metadata(self, snapshot: WorkspaceSnapshot) -> dict[str, Any]:
        keyvalues: dict[str, Any] = {
            "workspaceId": snapshot.workspace_id,
            "schemaVersion": snapshot.schema_version,
            "createdAt": snapshot.created_at.isoformat(),
        }
        if self.owner:
            keyvalues["owner"] = self.owner
        return {
            "name": f"Workspace {snapshot.workspace_id}",
            "filename": f"workspace-{snapshot.workspace_id}.json",
            "keyvalues": keyvalues,
        }

    async def _unpin_quietly(self, content_id: ContentId) -> None:
        try:
            await self.blob_store.unpin(content_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Could not unpin {content_id}: {exc}")
