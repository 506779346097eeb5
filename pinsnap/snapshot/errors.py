from __future__ import annotations

from typing import Any


class SnapshotError(Exception):
    """Base error for snapshot operations."""


class ConfigurationError(SnapshotError):
    """Raised when required settings are missing or invalid."""


class UploadFailed(SnapshotError):
    """Raised when the blob store rejects a snapshot upload."""


class PointerUpdateFailed(SnapshotError):
    """Raised when the pointer registry rejects a new content id."""


class FetchFailed(SnapshotError):
    """Raised when the blob store cannot return a requested blob."""


class InvalidFormat(SnapshotError):
    """Raised when a fetched blob is not a valid workspace snapshot."""


class PartialFileError(SnapshotError):
    """Non-fatal failure on a single file, collected into diagnostics."""

    operation = "file"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{self.operation} failed for {path}: {reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "operation": self.operation,
            "path": self.path,
            "reason": self.reason,
        }


class PartialReadError(PartialFileError):
    """A file could not be read or decoded during serialization."""

    operation = "read"


class PartialWriteError(PartialFileError):
    """A file or folder could not be written during materialization."""

    operation = "write"
