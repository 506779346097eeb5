from __future__ import annotations

import json
import os
import tempfile
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def safe_json(value: Any, *, max_depth: int = 32) -> Any:
    """Coerce a value into plain JSON structures without inspecting its meaning."""
    return _safe_json(value, max_depth=max_depth, seen=set())


def _safe_json(value: Any, *, max_depth: int, seen: set[int]) -> Any:
    if max_depth < 0:
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    value_id = id(value)
    if value_id in seen:
        return "<circular>"
    seen.add(value_id)
    try:
        if isinstance(value, BaseModel):
            return _safe_json(value.model_dump(mode="json"), max_depth=max_depth - 1, seen=seen)
        if is_dataclass(value) and not isinstance(value, type):
            return _safe_json(asdict(value), max_depth=max_depth - 1, seen=seen)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Path):
            return value.as_posix()
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, dict):
            return {
                str(key): _safe_json(item, max_depth=max_depth - 1, seen=seen)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            return [
                _safe_json(item, max_depth=max_depth - 1, seen=seen)
                for item in value
            ]
        return str(value)
    finally:
        seen.discard(value_id)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write via a sibling temp file and os.replace so readers never see a partial file."""
    path = Path(path)
    temp_path = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        temp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(str(temp_path), str(path))
        temp_path = None
    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass


def atomic_write_json(path: Path, data: Any) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(safe_json(data), ensure_ascii=False, indent=2)
    atomic_write_bytes(path, payload.encode("utf-8"))
