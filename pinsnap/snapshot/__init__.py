"""Snapshot engine: serialize a workspace, pin it, and materialize it back."""

from .app_state import (
    AppStateProvider,
    CallableAppStateProvider,
    NullAppStateProvider,
    StaticAppStateProvider,
)
from .errors import (
    ConfigurationError,
    FetchFailed,
    InvalidFormat,
    PartialFileError,
    PartialReadError,
    PartialWriteError,
    PointerUpdateFailed,
    SnapshotError,
    UploadFailed,
)
from .models import (
    SCHEMA_VERSION,
    CommitResult,
    ContentId,
    PointerRecord,
    RestoreResult,
    SerializationResult,
    WorkspaceSnapshot,
)
from .serializer import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_MAX_FILES,
    StateSerializer,
    decode_snapshot,
    encode_snapshot,
)
from .materializer import FileMaterializer
from .engine import SnapshotEngine

__all__ = [
    "AppStateProvider",
    "CallableAppStateProvider",
    "NullAppStateProvider",
    "StaticAppStateProvider",
    "ConfigurationError",
    "FetchFailed",
    "InvalidFormat",
    "PartialFileError",
    "PartialReadError",
    "PartialWriteError",
    "PointerUpdateFailed",
    "SnapshotError",
    "UploadFailed",
    "SCHEMA_VERSION",
    "CommitResult",
    "ContentId",
    "PointerRecord",
    "RestoreResult",
    "SerializationResult",
    "WorkspaceSnapshot",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_MAX_FILES",
    "StateSerializer",
    "decode_snapshot",
    "encode_snapshot",
    "FileMaterializer",
    "SnapshotEngine",
]
