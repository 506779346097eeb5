"""Content-addressed workspace snapshots pinned to IPFS."""

from pinsnap.snapshot import (
    AppStateProvider,
    CommitResult,
    ConfigurationError,
    ContentId,
    FetchFailed,
    InvalidFormat,
    NullAppStateProvider,
    PartialReadError,
    PartialWriteError,
    PointerUpdateFailed,
    RestoreResult,
    SnapshotEngine,
    SnapshotError,
    UploadFailed,
    WorkspaceSnapshot,
)
from pinsnap.config import PinataSettings, SnapshotSettings, build_engine, load_settings

__version__ = "0.1.0"

__all__ = [
    "AppStateProvider",
    "CommitResult",
    "ConfigurationError",
    "ContentId",
    "FetchFailed",
    "InvalidFormat",
    "NullAppStateProvider",
    "PartialReadError",
    "PartialWriteError",
    "PointerUpdateFailed",
    "RestoreResult",
    "SnapshotEngine",
    "SnapshotError",
    "UploadFailed",
    "WorkspaceSnapshot",
    "PinataSettings",
    "SnapshotSettings",
    "build_engine",
    "load_settings",
]
