from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol


class AppStateProvider(Protocol):
    """Supplies the opaque application state stored alongside workspace files."""

    def get_app_state(self) -> dict[str, Any]:
        ...


class NullAppStateProvider:
    def get_app_state(self) -> dict[str, Any]:
        return {}


class StaticAppStateProvider:
    def __init__(self, state: Optional[Mapping[str, Any]] = None) -> None:
        self._state = dict(state or {})

    def get_app_state(self) -> dict[str, Any]:
        return dict(self._state)


class CallableAppStateProvider:
    def __init__(self, func: Callable[[], Mapping[str, Any]]) -> None:
        self._func = func

    def get_app_state(self) -> dict[str, Any]:
        return dict(self._func() or {})
