"""Lazy export surface for storage adapters."""

from snapstore.adapters.storage.service import StorageService

__all__ = ["StorageService", "AzureStorageService", "BlobReader", "BlobWriter"]


def __getattr__(name: str):
    if name == "AzureStorageService":
        from . import azure_blob as _impl  # local import = lazy load of the Azure SDK
        return getattr(_impl, name)
    if name in ("BlobReader", "BlobWriter"):
        from . import streams as _streams
        return getattr(_streams, name)
    raise AttributeError(name)
