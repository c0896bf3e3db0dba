class SnapStoreError(Exception):
    """Base class for all snapstore exceptions."""


class ConfigError(SnapStoreError):
    """Raised for missing/malformed configuration."""


class StorageError(SnapStoreError):
    """Raised when the storage backend cannot complete an operation."""


class StorageURIError(StorageError):
    """Raised when a storage endpoint or blob address cannot be built."""


class StorageServiceError(StorageError):
    """Raised for transport, auth, or service-side failures."""


class BlobNotFoundError(StorageServiceError):
    """Raised when a blob does not exist."""


__all__ = [
    "SnapStoreError",
    "ConfigError",
    "StorageError",
    "StorageURIError",
    "StorageServiceError",
    "BlobNotFoundError",
]
