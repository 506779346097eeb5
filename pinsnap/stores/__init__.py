"""Blob store and pointer registry backends."""

from pinsnap.stores.base import BlobStore, PointerRegistry
from pinsnap.stores.errors import BlobNotFoundError, BlobStoreError, PointerRegistryError
from pinsnap.stores.memory import InMemoryBlobStore, InMemoryPointerRegistry
from pinsnap.stores.pinata import PinataBlobStore
from pinsnap.stores.pointers import FilePointerRegistry

__all__ = [
    "BlobStore",
    "PointerRegistry",
    "BlobNotFoundError",
    "BlobStoreError",
    "PointerRegistryError",
    "InMemoryBlobStore",
    "InMemoryPointerRegistry",
    "PinataBlobStore",
    "FilePointerRegistry",
]
