from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from pinsnap.snapshot.models import ContentId, PointerRecord, utc_now
from pinsnap.stores.errors import PointerRegistryError
from pinsnap.utils.io import atomic_write_json


class FilePointerRegistry:
    """Pointer registry persisted as one JSON document keyed by workspace id."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    async def get(self, workspace_id: str) -> Optional[ContentId]:
        record = await asyncio.to_thread(self.get_record, workspace_id)
        return ContentId(record.current_content_id) if record else None

    async def set(self, workspace_id: str, content_id: ContentId) -> PointerRecord:
        return await asyncio.to_thread(self._set_sync, workspace_id, content_id)

    def get_record(self, workspace_id: str) -> Optional[PointerRecord]:
        with self._lock:
            return self._load().get(workspace_id)

    def records(self) -> dict[str, PointerRecord]:
        with self._lock:
            return self._load()

    def _set_sync(self, workspace_id: str, content_id: ContentId) -> PointerRecord:
        with self._lock:
            records = self._load()
            record = PointerRecord(
                workspace_id=workspace_id,
                current_content_id=content_id,
                updated_at=utc_now(),
            )
            records[workspace_id] = record
            payload = {key: value.model_dump(mode="json") for key, value in records.items()}
            try:
                atomic_write_json(self.path, {"pointers": payload})
            except OSError as exc:
                raise PointerRegistryError(f"Could not persist pointer file {self.path}") from exc
            logger.debug(f"Pointer for {workspace_id} now {content_id}")
            return record

    def _load(self) -> dict[str, PointerRecord]:
        if not self.path.exists():
            return {}
        try:
            payload: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PointerRegistryError(f"Invalid pointer file: {self.path}") from exc
        except OSError as exc:
            raise PointerRegistryError(f"Could not read pointer file: {self.path}") from exc
        if not isinstance(payload, dict):
            raise PointerRegistryError("Pointer file must contain a JSON object")
        pointers = payload.get("pointers") or {}
        if not isinstance(pointers, dict):
            raise PointerRegistryError("Pointer file 'pointers' must be an object")
        try:
            return {key: PointerRecord.model_validate(value) for key, value in pointers.items()}
        except ValidationError as exc:
            raise PointerRegistryError(f"Invalid pointer record in {self.path}") from exc
