from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Optional

from loguru import logger

from pinsnap.snapshot.errors import PartialWriteError
from pinsnap.snapshot.models import WorkspaceSnapshot
from pinsnap.utils.io import atomic_write_bytes


class FileMaterializer:
    """Writes a snapshot's folders and files under a target root, last write wins."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def materialize(self, snapshot: WorkspaceSnapshot, root: Path | str) -> list[PartialWriteError]:
        target_root = Path(root)
        target_root.mkdir(parents=True, exist_ok=True)
        resolved_root = target_root.resolve()
        diagnostics: list[PartialWriteError] = []

        # Folders first so every parent exists before a file lands in it.
        for folder in snapshot.folders:
            path = self._resolve(resolved_root, folder, diagnostics, is_dir=True)
            if path is None:
                continue
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.warning(f"Could not create folder {folder}: {exc}")
                diagnostics.append(PartialWriteError(folder, str(exc)))

        written = 0
        for relative, content in snapshot.files.items():
            path = self._resolve(resolved_root, relative, diagnostics)
            if path is None:
                continue
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                atomic_write_bytes(path, content.encode(self.encoding))
                written += 1
            except OSError as exc:
                logger.warning(f"Could not write {relative}: {exc}")
                diagnostics.append(PartialWriteError(relative, str(exc)))

        logger.debug(
            f"Materialized {written}/{len(snapshot.files)} files and "
            f"{len(snapshot.folders)} folders into {resolved_root}"
        )
        return diagnostics

    def _resolve(
        self,
        root: Path,
        relative: str,
        diagnostics: list[PartialWriteError],
        *,
        is_dir: bool = False,
    ) -> Optional[Path]:
        pure = PurePosixPath(relative)
        if relative and not pure.is_absolute() and ".." not in pure.parts:
            candidate = root.joinpath(*pure.parts)
            # Symlinks already under root may point elsewhere; a file itself is replaced, not followed.
            anchor = candidate if is_dir else candidate.parent
            if anchor.resolve().is_relative_to(root):
                return candidate
        logger.warning(f"Refusing to write outside the target root: {relative!r}")
        diagnostics.append(PartialWriteError(relative, "path escapes the target root"))
        return None
