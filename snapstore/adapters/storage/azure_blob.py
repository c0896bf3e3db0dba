"""
Azure Blob Storage implementation of the storage service capability.

Design notes:
- One BlobServiceClient is cached per (account, location mode).
- Credential precedence for the default account: connection string ->
  account/key -> DefaultAzureCredential. Named accounts use their shared key
  from settings when one is configured, DefaultAzureCredential otherwise.
- Location modes map onto the SDK's primary endpoint, the ``-secondary``
  endpoint, and ``retry_to_secondary`` for the fallback mode. Retry itself
  stays inside the SDK.
- SDK errors are re-raised as StorageServiceError / BlobNotFoundError and
  client construction errors as StorageURIError, with the original chained.
"""

from __future__ import annotations

import io
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Sequence, Tuple

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient
from loguru import logger

from snapstore.adapters.storage.streams import DEFAULT_BLOCK_SIZE, BlobReader, BlobWriter
from snapstore.core.exceptions import (
    BlobNotFoundError,
    ConfigError,
    StorageServiceError,
    StorageURIError,
)
from snapstore.core.models import BlobMetadata, LocationMode
from snapstore.settings import StorageSettings, get_storage_settings

if TYPE_CHECKING:  # pragma: no cover
    from azure.storage.blob import BlobClient, ContainerClient

_ClientKey = Tuple[Optional[str], LocationMode]


@contextmanager
def _azure_errors(action: str, target: str, *, missing_blob: bool = False):
    try:
        yield
    except ResourceNotFoundError as e:
        if missing_blob:
            raise BlobNotFoundError(f"{action} [{target}]: blob not found") from e
        raise StorageServiceError(f"{action} [{target}]: {e}") from e
    except AzureError as e:
        raise StorageServiceError(f"{action} [{target}]: {e}") from e


class AzureStorageService:
    """Addresses one or more Azure storage accounts through azure-storage-blob."""

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        *,
        client_cls: Any = BlobServiceClient,
        credential_factory: Any = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        self._settings = settings or get_storage_settings()
        self._keys = self._settings.key_map()
        self._client_cls = client_cls
        self._credential_factory = credential_factory
        self._credential: Any = None
        self._block_size = block_size
        self._clients: Dict[_ClientKey, Any] = {}
        self._lock = threading.Lock()

    # --------------------------
    # Client resolution
    # --------------------------

    def _endpoint(self, account: str, *, secondary: bool = False) -> str:
        suffix = self._settings.endpoint_suffix.strip().strip(".")
        host = f"{account}-secondary" if secondary else account
        return f"{host}.blob.{suffix}"

    def _default_credential(self) -> Any:
        if self._credential is None:
            if self._credential_factory is not None:
                self._credential = self._credential_factory()
            else:
                from azure.identity import DefaultAzureCredential  # lazy import

                self._credential = DefaultAzureCredential()
        return self._credential

    def check_config(self, accounts: Sequence[str], mode: LocationMode) -> None:
        """
        Fails fast when the pool cannot be addressed in ``mode``.

        Raises:
            ConfigError: If the default account is needed but not configured,
                or a connection string is combined with a secondary-only mode.
        """
        if accounts:
            return
        try:
            self._default_target(mode)
        except StorageURIError as e:
            raise ConfigError(str(e)) from e

    def _default_target(self, mode: LocationMode) -> Tuple[Optional[str], Optional[str]]:
        """(connection string, account name) used for the default account."""
        conn = (self._settings.connection_string or "").strip()
        if conn:
            if not mode.reads_primary_first:
                raise StorageURIError(
                    f"location mode [{mode.value}] needs an account name; "
                    "connection strings only address the primary endpoint first"
                )
            return conn, None
        name = (self._settings.account or "").strip()
        if not name:
            raise StorageURIError(
                "Azure storage not configured: set AZURE_STORAGE_CONNECTION_STRING "
                "or AZURE_STORAGE_ACCOUNT"
            )
        return None, name

    def _build_client(self, account: Optional[str], mode: LocationMode) -> Any:
        kwargs: Dict[str, Any] = {"retry_to_secondary": mode.has_fallback}

        name = account
        if name is None:
            conn, name = self._default_target(mode)
            if conn:
                try:
                    return self._client_cls.from_connection_string(conn, **kwargs)
                except ValueError as e:
                    raise StorageURIError(f"invalid storage connection string: {e}") from e

        # Writes always go to the main URL; only SECONDARY_ONLY points it at the
        # read-only secondary endpoint.
        primary = self._endpoint(name)
        secondary = self._endpoint(name, secondary=True)
        if mode is LocationMode.SECONDARY_ONLY:
            url = secondary
        else:
            url = primary
            if mode.has_fallback:
                kwargs["secondary_hostname"] = secondary

        credential = self._keys.get(name) or self._default_credential()
        try:
            return self._client_cls(f"https://{url}", credential=credential, **kwargs)
        except ValueError as e:
            raise StorageURIError(f"invalid endpoint for account [{name}]: {e}") from e

    def _service(self, account: Optional[str], mode: LocationMode) -> Any:
        key = (account, mode)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                logger.debug(
                    "creating blob service client: account={} mode={}",
                    account or "<default>",
                    mode.value,
                )
                client = self._build_client(account, mode)
                self._clients[key] = client
            return client

    def _container(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> "ContainerClient":
        return self._service(account, mode).get_container_client(container)

    def _blob(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> "BlobClient":
        return self._service(account, mode).get_blob_client(container, blob)

    # --------------------------
    # Blob operations
    # --------------------------

    def blob_exists(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> bool:
        with _azure_errors("check blob", f"{container}/{blob}"):
            return bool(self._blob(account, mode, container, blob).exists())

    def delete_blob(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> None:
        with _azure_errors("delete blob", f"{container}/{blob}", missing_blob=True):
            self._blob(account, mode, container, blob).delete_blob()

    def open_read(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> io.BufferedReader:
        target = f"{container}/{blob}"
        with _azure_errors("read blob", target, missing_blob=True):
            downloader = self._blob(account, mode, container, blob).download_blob()

        def _chunks() -> Iterator[bytes]:
            with _azure_errors("read blob", target, missing_blob=True):
                yield from downloader.chunks()

        return io.BufferedReader(BlobReader(_chunks(), name=blob))

    def open_write(
        self, account: Optional[str], mode: LocationMode, container: str, blob: str
    ) -> BlobWriter:
        target = f"{container}/{blob}"
        client = self._blob(account, mode, container, blob)

        def _stage(block_id: str, data: bytes) -> None:
            with _azure_errors("write blob", target):
                client.stage_block(block_id, data)

        def _commit(block_ids) -> None:
            with _azure_errors("commit blob", target):
                client.commit_block_list(block_ids)

        return BlobWriter(_stage, _commit, name=blob, block_size=self._block_size)

    def delete_by_prefix(
        self, account: Optional[str], mode: LocationMode, container: str, prefix: str
    ) -> None:
        client = self._container(account, mode, container)
        with _azure_errors("delete blobs", f"{container}/{prefix}"):
            if not client.exists():
                return
            names = [item.name for item in client.list_blobs(name_starts_with=prefix or None)]
            for name in names:
                try:
                    client.delete_blob(name)
                except ResourceNotFoundError:
                    continue
        logger.debug("deleted {} blob(s) under [{}/{}]", len(names), container, prefix)

    # --------------------------
    # Container operations
    # --------------------------

    def container_exists(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> bool:
        with _azure_errors("check container", container):
            return bool(self._container(account, mode, container).exists())

    def create_container(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> None:
        with _azure_errors("create container", container):
            try:
                self._container(account, mode, container).create_container()
            except ResourceExistsError:
                pass

    def remove_container(
        self, account: Optional[str], mode: LocationMode, container: str
    ) -> None:
        with _azure_errors("remove container", container):
            try:
                self._container(account, mode, container).delete_container()
            except ResourceNotFoundError:
                pass

    def list_by_prefix(
        self,
        account: Optional[str],
        mode: LocationMode,
        container: str,
        key_path: str,
        prefix: Optional[str],
    ) -> Dict[str, BlobMetadata]:
        full_prefix = key_path + (prefix or "")
        blobs: Dict[str, BlobMetadata] = {}
        with _azure_errors("list blobs", f"{container}/{full_prefix}"):
            client = self._container(account, mode, container)
            for item in client.list_blobs(name_starts_with=full_prefix or None):
                name = item.name[len(key_path):]
                blobs[name] = BlobMetadata(name=name, length=int(item.size or 0))
        return blobs

    def close(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            close = getattr(client, "close", None)
            if callable(close):
                close()
        close = getattr(self._credential, "close", None)
        if callable(close):
            close()
        self._credential = None


__all__ = ["AzureStorageService"]
