from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from loguru import logger
from pathspec import GitIgnoreSpec
from pydantic import ValidationError

from pinsnap.snapshot.app_state import AppStateProvider, NullAppStateProvider
from pinsnap.snapshot.errors import InvalidFormat, PartialReadError
from pinsnap.snapshot.models import SCHEMA_VERSION, SerializationResult, WorkspaceSnapshot, utc_now
from pinsnap.utils.io import safe_json


DEFAULT_MAX_FILES = 100
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = ("node_modules/", ".git/")

_REQUIRED_STRING_FIELDS = ("workspaceId", "schemaVersion")


class StateSerializer:
    """Scans a directory tree into a WorkspaceSnapshot and owns its canonical encoding."""

    def __init__(
        self,
        ignore_patterns: Optional[Sequence[str]] = None,
        max_files: int = DEFAULT_MAX_FILES,
    ) -> None:
        if max_files < 0:
            raise ValueError("max_files must be >= 0")
        patterns = DEFAULT_IGNORE_PATTERNS if ignore_patterns is None else tuple(ignore_patterns)
        self.ignore_patterns = list(patterns)
        self.max_files = max_files
        self._spec = GitIgnoreSpec.from_lines(self.ignore_patterns)

    def serialize(
        self,
        scan_root: Path | str,
        workspace_id: str,
        app_state_provider: Optional[AppStateProvider] = None,
    ) -> SerializationResult:
        root = Path(scan_root)
        if not root.exists():
            raise FileNotFoundError(f"Scan root not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Scan root is not a directory: {root}")

        provider = app_state_provider or NullAppStateProvider()
        files: dict[str, str] = {}
        folders: list[str] = []
        diagnostics: list[PartialReadError] = []

        for relative, path, is_dir in self._walk(root, root, diagnostics):
            if len(files) >= self.max_files:
                logger.debug(f"File cap of {self.max_files} reached, dropping remaining entries at {relative}")
                break
            if is_dir:
                folders.append(relative)
                continue
            text = self._read_text(path, relative, diagnostics)
            if text is not None:
                files[relative] = text

        snapshot = WorkspaceSnapshot(
            schema_version=SCHEMA_VERSION,
            created_at=utc_now(),
            workspace_id=workspace_id,
            app_state=provider.get_app_state(),
            files=files,
            folders=sorted(set(folders)),
        )
        return SerializationResult(snapshot=snapshot, diagnostics=diagnostics)

    def encode(self, snapshot: WorkspaceSnapshot) -> bytes:
        return encode_snapshot(snapshot)

    def decode(self, data: bytes | str) -> WorkspaceSnapshot:
        return decode_snapshot(data)

    def is_ignored(self, relative: str, is_dir: bool = False) -> bool:
        candidate = f"{relative}/" if is_dir else relative
        return self._spec.match_file(candidate)

    def _walk(
        self,
        root: Path,
        directory: Path,
        diagnostics: list[PartialReadError],
    ) -> Iterator[tuple[str, Path, bool]]:
        # Files of a directory come before its subdirectories, both in name order.
        try:
            entries = sorted(directory.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            if directory == root:
                raise
            relative = directory.relative_to(root).as_posix()
            logger.warning(f"Could not list {relative}: {exc}")
            diagnostics.append(PartialReadError(relative, str(exc)))
            return

        subdirs: list[Path] = []
        for entry in entries:
            relative = entry.relative_to(root).as_posix()
            is_dir = entry.is_dir() and not entry.is_symlink()
            try:
                relative.encode("utf-8")
            except UnicodeEncodeError:
                # Undecodable names come back from the OS as lone surrogates.
                logger.warning(f"Skipping {relative!r}: path is not valid UTF-8")
                diagnostics.append(PartialReadError(relative, "path is not valid UTF-8"))
                continue
            if self.is_ignored(relative, is_dir=is_dir):
                logger.debug(f"Ignoring {relative}")
                continue
            if is_dir:
                subdirs.append(entry)
            elif entry.is_file():
                yield relative, entry, False

        for subdir in subdirs:
            yield subdir.relative_to(root).as_posix(), subdir, True
            yield from self._walk(root, subdir, diagnostics)

    def _read_text(
        self,
        path: Path,
        relative: str,
        diagnostics: list[PartialReadError],
    ) -> Optional[str]:
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning(f"Could not read {relative}: {exc}")
            diagnostics.append(PartialReadError(relative, str(exc)))
            return None
        if b"\x00" in data:
            logger.debug(f"Skipping binary file {relative}")
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning(f"Could not decode {relative} as UTF-8: {exc}")
            diagnostics.append(PartialReadError(relative, f"not valid UTF-8: {exc.reason}"))
            return None


def encode_snapshot(snapshot: WorkspaceSnapshot) -> bytes:
    """Canonical bytes for a snapshot: sorted keys, compact separators, UTF-8."""
    payload = snapshot.model_dump(mode="json", by_alias=True, exclude={"app_state"})
    payload["appState"] = safe_json(snapshot.app_state)
    text = json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return text.encode("utf-8")


def decode_snapshot(data: bytes | str) -> WorkspaceSnapshot:
    try:
        payload: Any = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidFormat("Snapshot blob is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise InvalidFormat("Snapshot JSON must be an object")
    for name in _REQUIRED_STRING_FIELDS:
        value = payload.get(name)
        if value is None:
            raise InvalidFormat(f"Snapshot is missing required field {name!r}")
        if not isinstance(value, str):
            raise InvalidFormat(f"Snapshot field {name!r} must be a string")
    try:
        return WorkspaceSnapshot.model_validate(payload)
    except ValidationError as exc:
        raise InvalidFormat(f"Invalid snapshot structure: {exc.error_count()} error(s)") from exc
