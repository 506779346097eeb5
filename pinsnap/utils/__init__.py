"""Shared I/O helpers."""

from pinsnap.utils.io import atomic_write_bytes, atomic_write_json, safe_json

__all__ = ["atomic_write_bytes", "atomic_write_json", "safe_json"]
