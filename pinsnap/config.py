"""
Explicit configuration for the snapshot engine and its Pinata backend.

Settings are built once (from a mapping, a YAML/JSON file or the environment)
and injected; nothing here falls back to a bundled credential.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Optional

import yaml

from pinsnap.snapshot.errors import ConfigurationError
from pinsnap.snapshot.serializer import DEFAULT_IGNORE_PATTERNS, DEFAULT_MAX_FILES

if TYPE_CHECKING:
    from pinsnap.snapshot.app_state import AppStateProvider
    from pinsnap.snapshot.engine import SnapshotEngine


ENV_PINATA_JWT = "PINATA_JWT"
ENV_PINATA_GATEWAY = "PINATA_GATEWAY"
ENV_PINATA_API_URL = "PINATA_API_URL"

DEFAULT_GATEWAY = "gateway.pinata.cloud"
DEFAULT_API_URL = "https://api.pinata.cloud"


@dataclass
class PinataSettings:
    jwt: str = ""
    gateway: str = DEFAULT_GATEWAY
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0

    def validate(self) -> "PinataSettings":
        if not self.jwt or not self.jwt.strip():
            raise ConfigurationError("Pinata JWT is not configured")
        if self.timeout <= 0:
            raise ConfigurationError("Pinata timeout must be positive")
        return self

    @property
    def gateway_url(self) -> str:
        gateway = self.gateway.rstrip("/")
        if gateway.startswith(("http://", "https://")):
            return gateway
        return f"https://{gateway}"

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "PinataSettings":
        data = data or {}
        timeout = data.get("timeout", 30.0)
        try:
            timeout_value = float(timeout)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid Pinata timeout: {timeout!r}") from exc
        return cls(
            jwt=str(data.get("jwt") or ""),
            gateway=str(data.get("gateway") or DEFAULT_GATEWAY),
            api_url=str(data.get("api_url") or DEFAULT_API_URL),
            timeout=timeout_value,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PinataSettings":
        environ = os.environ if environ is None else environ
        return cls(
            jwt=environ.get(ENV_PINATA_JWT, ""),
            gateway=environ.get(ENV_PINATA_GATEWAY) or DEFAULT_GATEWAY,
            api_url=environ.get(ENV_PINATA_API_URL) or DEFAULT_API_URL,
        )


@dataclass
class SnapshotSettings:
    max_files: int = DEFAULT_MAX_FILES
    ignore_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    pointer_file: Optional[str] = None
    owner: Optional[str] = None
    pinata: Optional[PinataSettings] = None

    @classmethod
    def from_mapping(cls, settings: Optional[Mapping[str, Any]]) -> "SnapshotSettings":
        settings = settings or {}
        section = settings.get("snapshot") or {}
        if not isinstance(section, Mapping):
            raise ConfigurationError("'snapshot' settings must be a mapping")
        ignore_patterns = section.get("ignore_patterns")
        if ignore_patterns is None:
            ignore_patterns = list(DEFAULT_IGNORE_PATTERNS)
        elif not isinstance(ignore_patterns, list) or any(not isinstance(item, str) for item in ignore_patterns):
            raise ConfigurationError("snapshot.ignore_patterns must be list[str]")
        pinata_data = settings.get("pinata")
        return cls(
            max_files=int(section.get("max_files", DEFAULT_MAX_FILES)),
            ignore_patterns=list(ignore_patterns),
            pointer_file=section.get("pointer_file") or None,
            owner=section.get("owner") or None,
            pinata=PinataSettings.from_mapping(pinata_data) if pinata_data is not None else None,
        )


def load_mapping_from_path(path: str | Path) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            if config_path.suffix in {".yaml", ".yml"}:
                data = yaml.safe_load(handle)
            elif config_path.suffix == ".json":
                data = json.load(handle)
            else:
                raise ConfigurationError(f"Unsupported settings format: {config_path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Could not parse settings file: {path}") from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError("Settings file must contain a mapping")
    return dict(data)


def load_settings(path: str | Path) -> SnapshotSettings:
    return SnapshotSettings.from_mapping(load_mapping_from_path(path))


def build_engine(
    settings: SnapshotSettings,
    *,
    app_state_provider: Optional["AppStateProvider"] = None,
) -> "SnapshotEngine":
    """Wire a Pinata-backed engine from settings.

    Args:
        settings: Snapshot settings; ``settings.pinata`` must carry a JWT.
        app_state_provider: Default provider for commits that pass none.

    Returns:
        A SnapshotEngine owning its blob store and pointer registry.

    Raises:
        ConfigurationError: If Pinata settings are missing or incomplete.
    """
    from pinsnap.snapshot.engine import SnapshotEngine
    from pinsnap.snapshot.serializer import StateSerializer
    from pinsnap.stores.memory import InMemoryPointerRegistry
    from pinsnap.stores.pinata import PinataBlobStore
    from pinsnap.stores.pointers import FilePointerRegistry

    if settings.pinata is None:
        raise ConfigurationError("Pinata settings are required to build an engine")
    blob_store = PinataBlobStore(settings.pinata)
    pointers = (
        FilePointerRegistry(settings.pointer_file)
        if settings.pointer_file
        else InMemoryPointerRegistry()
    )
    serializer = StateSerializer(
        ignore_patterns=settings.ignore_patterns,
        max_files=settings.max_files,
    )
    return SnapshotEngine(
        blob_store,
        pointers,
        serializer=serializer,
        app_state_provider=app_state_provider,
        owner=settings.owner,
    )
