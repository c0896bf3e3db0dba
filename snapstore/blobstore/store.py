"""
Sharded blob store facade.

Routes each blob key to one account of a fixed pool and fans container-wide
operations out to every account, in pool order, one at a time. The facade
holds only immutable configuration, so one instance may be shared freely
between threads; blocking and timeouts are whatever the storage service does.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Callable, Dict, Optional, Sequence, TypeVar

from loguru import logger

from snapstore.adapters.storage.service import StorageService
from snapstore.blobstore.config import BlobStoreConfig
from snapstore.core.exceptions import StorageServiceError, StorageURIError
from snapstore.core.models import BlobMetadata, BlobPath, LocationMode

if TYPE_CHECKING:  # pragma: no cover
    from snapstore.blobstore.container import ShardedBlobContainer

T = TypeVar("T")


def key_hash(key: Optional[str]) -> int:
    """Sum of the key's code points; 0 for an empty or missing key."""
    if not key:
        return 0
    return sum(ord(ch) for ch in key)


def account_index(key: Optional[str], pool_size: int) -> int:
    """Index into a pool of ``pool_size`` accounts for ``key``."""
    if pool_size <= 0:
        raise ValueError("pool_size must be positive")
    return abs(key_hash(key) % pool_size)


class ShardedBlobStore:
    """Blob store spread over a pool of storage accounts."""

    def __init__(self, config: BlobStoreConfig, service: StorageService):
        self._config = config
        self._service = service

    def __str__(self) -> str:
        return self._config.container

    def __repr__(self) -> str:
        return (
            f"ShardedBlobStore(container={self._config.container!r}, "
            f"accounts={list(self._config.accounts)!r}, "
            f"location_mode={self._config.location_mode.value!r})"
        )

    @property
    def container(self) -> str:
        return self._config.container

    @property
    def accounts(self) -> Sequence[str]:
        return self._config.accounts

    @property
    def location_mode(self) -> LocationMode:
        return self._config.location_mode  # type: ignore[return-value]

    @property
    def service(self) -> StorageService:
        return self._service

    # --------------------------
    # Routing
    # --------------------------

    def resolve_account(self, key: Optional[str]) -> Optional[str]:
        """Account holding ``key``, or None to use the service's default account."""
        accounts = self._config.accounts
        if not accounts:
            return None
        return accounts[account_index(key, len(accounts))]

    def _targets(self) -> Sequence[Optional[str]]:
        return self._config.accounts or (None,)

    def _fan_out(self, action: str, call: Callable[[Optional[str]], T]) -> list[T]:
        results = []
        for account in self._targets():
            logger.debug(
                "{} on account={} container={}",
                action,
                account or "<default>",
                self._config.container,
            )
            results.append(call(account))
        return results

    # --------------------------
    # Container handles
    # --------------------------

    def blob_container(self, path: BlobPath) -> "ShardedBlobContainer":
        from snapstore.blobstore.container import ShardedBlobContainer

        return ShardedBlobContainer(path, self)

    def delete(self, path: BlobPath) -> None:
        """Best-effort recursive delete of everything under ``path``."""
        key_path = path.key_prefix()
        try:
            self.delete_by_prefix(self._config.container, key_path)
        except (StorageURIError, StorageServiceError) as e:
            logger.warning(
                "can not remove [{}] in container {{{}}}: {}",
                key_path,
                self._config.container,
                e,
            )

    # --------------------------
    # Container-wide operations
    # --------------------------

    def container_exists(self, container: Optional[str] = None) -> bool:
        """True only if the container exists in every account of the pool."""
        container = container or self._config.container
        mode = self.location_mode
        for account in self._targets():
            if not self._service.container_exists(account, mode, container):
                return False
        return True

    def create_container(self, container: Optional[str] = None) -> None:
        container = container or self._config.container
        mode = self.location_mode
        self._fan_out(
            "create container",
            lambda account: self._service.create_container(account, mode, container),
        )

    def remove_container(self, container: Optional[str] = None) -> None:
        container = container or self._config.container
        mode = self.location_mode
        self._fan_out(
            "remove container",
            lambda account: self._service.remove_container(account, mode, container),
        )

    def delete_by_prefix(self, container: str, prefix: str) -> None:
        mode = self.location_mode
        self._fan_out(
            "delete by prefix",
            lambda account: self._service.delete_by_prefix(account, mode, container, prefix),
        )

    def list_by_prefix(
        self, container: str, key_path: str, prefix: Optional[str] = None
    ) -> Dict[str, BlobMetadata]:
        """
        Merged listing of every account.

        When two accounts hold the same name, the entry from the account that
        comes later in the pool wins.
        """
        mode = self.location_mode
        merged: Dict[str, BlobMetadata] = {}
        for blobs in self._fan_out(
            "list by prefix",
            lambda account: self._service.list_by_prefix(
                account, mode, container, key_path, prefix
            ),
        ):
            merged.update(blobs)
        return merged

    # --------------------------
    # Per-blob operations
    # --------------------------

    def blob_exists(self, container: str, blob: str) -> bool:
        account = self.resolve_account(blob)
        return self._service.blob_exists(account, self.location_mode, container, blob)

    def delete_blob(self, container: str, blob: str) -> None:
        account = self.resolve_account(blob)
        self._service.delete_blob(account, self.location_mode, container, blob)

    def open_read(self, container: str, blob: str) -> BinaryIO:
        account = self.resolve_account(blob)
        return self._service.open_read(account, self.location_mode, container, blob)

    def open_write(self, container: str, blob: str) -> BinaryIO:
        account = self.resolve_account(blob)
        return self._service.open_write(account, self.location_mode, container, blob)

    # --------------------------
    # Lifecycle
    # --------------------------

    def close(self) -> None:
        close = getattr(self._service, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "ShardedBlobStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def build_blob_store(
    config: Optional[BlobStoreConfig] = None,
    service: Optional[StorageService] = None,
) -> ShardedBlobStore:
    """
    Wire a store from environment settings unless explicit parts are given.

    Raises:
        ConfigError: If the default Azure service can not address the pool.
    """
    config = config or BlobStoreConfig.from_settings()
    if service is None:
        from snapstore.adapters.storage.azure_blob import AzureStorageService

        azure = AzureStorageService()
        azure.check_config(config.accounts, config.location_mode)
        service = azure
    return ShardedBlobStore(config, service)


__all__ = ["ShardedBlobStore", "build_blob_store", "key_hash", "account_index"]
