class BlobStoreError(Exception):
    """Raised when a blob store request fails."""


class BlobNotFoundError(BlobStoreError):
    """Raised when a content id is unknown to the blob store."""


class PointerRegistryError(Exception):
    """Raised when a pointer cannot be read or persisted."""
