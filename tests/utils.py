from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Union

from pinsnap.snapshot import SnapshotEngine, StateSerializer
from pinsnap.stores.memory import InMemoryBlobStore, InMemoryPointerRegistry


def make_workspace(root: Path, files: Mapping[str, Union[str, bytes]]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def read_tree(root: Path) -> dict[str, str]:
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def make_engine(
    *,
    blob_store: Optional[object] = None,
    pointers: Optional[object] = None,
    serializer: Optional[StateSerializer] = None,
    owner: Optional[str] = None,
) -> SnapshotEngine:
    return SnapshotEngine(
        blob_store or InMemoryBlobStore(),
        pointers or InMemoryPointerRegistry(),
        serializer=serializer,
        owner=owner,
    )
