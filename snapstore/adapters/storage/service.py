"""Storage client capability consumed by the sharded blob store.

Every call is addressed by ``(account, location_mode, container, ...)``.
``account=None`` selects the implementation's default account. Implementations
raise :class:`~snapstore.core.exceptions.StorageURIError` for addressing
problems and :class:`~snapstore.core.exceptions.StorageServiceError` for
transport, auth and service-side failures.
"""

from __future__ import annotations

from typing import BinaryIO, Dict, Optional, Protocol, runtime_checkable

from snapstore.core.models import BlobMetadata, LocationMode


@runtime_checkable
class StorageService(Protocol):
    def blob_exists(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> bool: ...

    def delete_blob(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> None: ...

    def open_read(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> BinaryIO: ...

    def open_write(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> BinaryIO: ...

    def delete_by_prefix(
        self, account: Optional[str], mode: LocationMode, container: str, prefix: str
    ) -> None: ...

    def container_exists(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> bool: ...

    def create_container(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> None: ...

    def remove_container(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> None: ...

    def list_by_prefix(
        self,
        account: Optional[str],
        mode: LocationMode,
        container: str,
        key_path: str,
        prefix: Optional[str],
    ) -> Dict[str, BlobMetadata]: ...


__all__ = ["StorageService"]
