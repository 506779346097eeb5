from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, NewType, Optional

from pydantic import BaseModel, ConfigDict, Field

from pinsnap.snapshot.errors import PartialReadError, PartialWriteError


SCHEMA_VERSION = "1.0.0"

ContentId = NewType("ContentId", str)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WorkspaceSnapshot(BaseModel):
    """Point-in-time state of a workspace: text files, folders and opaque app state."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    schema_version: str = Field(alias="schemaVersion")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    workspace_id: str = Field(alias="workspaceId")
    app_state: dict[str, Any] = Field(default_factory=dict, alias="appState")
    files: dict[str, str] = Field(default_factory=dict)
    folders: list[str] = Field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)


class PointerRecord(BaseModel):
    """The current content id for one workspace."""

    workspace_id: str
    current_content_id: str
    updated_at: datetime = Field(default_factory=utc_now)


@dataclass
class SerializationResult:
    snapshot: WorkspaceSnapshot
    diagnostics: list[PartialReadError] = field(default_factory=list)


@dataclass
class CommitResult:
    content_id: ContentId
    snapshot: WorkspaceSnapshot
    previous_content_id: Optional[ContentId] = None
    diagnostics: list[PartialReadError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_id": self.content_id,
            "previous_content_id": self.previous_content_id,
            "workspace_id": self.snapshot.workspace_id,
            "file_count": self.snapshot.file_count,
            "diagnostics": [item.to_dict() for item in self.diagnostics],
        }


@dataclass
class RestoreResult:
    content_id: ContentId
    snapshot: WorkspaceSnapshot
    diagnostics: list[PartialWriteError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics
