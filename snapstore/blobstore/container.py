from __future__ import annotations

import shutil
from typing import TYPE_CHECKING, BinaryIO, Dict, Optional, Union

from loguru import logger

from snapstore.core.exceptions import BlobNotFoundError, StorageError, StorageServiceError
from snapstore.core.models import BlobMetadata, BlobPath

if TYPE_CHECKING:  # pragma: no cover
    from snapstore.blobstore.store import ShardedBlobStore

_COPY_CHUNK = 64 * 1024


class ShardedBlobContainer:
    """Handle on one path of a sharded blob store; blob names are relative to it."""

    def __init__(self, path: BlobPath, store: "ShardedBlobStore"):
        self._path = path
        self._store = store
        self._key_prefix = path.key_prefix()

    def __repr__(self) -> str:
        return f"ShardedBlobContainer(container={self._store.container!r}, path={self._path})"

    @property
    def path(self) -> BlobPath:
        return self._path

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def build_key(self, name: str) -> str:
        return self._key_prefix + name

    def blob_exists(self, name: str) -> bool:
        """Lookup failures count as absence."""
        key = self.build_key(name)
        try:
            return self._store.blob_exists(self._store.container, key)
        except StorageError as e:
            logger.debug("can not access [{}] in container {{{}}}: {}", key, self._store.container, e)
            return False

    def read_blob(self, name: str) -> BinaryIO:
        key = self.build_key(name)
        if not self.blob_exists(name):
            raise BlobNotFoundError(f"blob [{key}] does not exist")
        return self._store.open_read(self._store.container, key)

    def write_blob(
        self, name: str, data: Union[bytes, bytearray, BinaryIO], length: Optional[int] = None
    ) -> None:
        """
        Writes ``data`` under ``name``.

        If ``length`` is given, exactly that many bytes are copied from the
        stream; a short stream aborts the upload and raises.
        """
        key = self.build_key(name)
        logger.debug("writing blob [{}] in container {{{}}}", key, self._store.container)
        writer = self._store.open_write(self._store.container, key)
        with writer:
            if isinstance(data, (bytes, bytearray, memoryview)):
                payload = bytes(data) if length is None else bytes(data[:length])
                writer.write(payload)
                copied = len(payload)
            elif length is None:
                shutil.copyfileobj(data, writer, _COPY_CHUNK)
                copied = None
            else:
                copied = 0
                while copied < length:
                    chunk = data.read(min(_COPY_CHUNK, length - copied))
                    if not chunk:
                        break
                    writer.write(chunk)
                    copied += len(chunk)
            if length is not None and copied != length:
                raise StorageServiceError(
                    f"blob [{key}]: expected {length} bytes but stream ended after {copied}"
                )

    def delete_blob(self, name: str) -> None:
        key = self.build_key(name)
        if not self.blob_exists(name):
            raise BlobNotFoundError(f"blob [{key}] does not exist")
        self._store.delete_blob(self._store.container, key)

    def delete_blobs_by_prefix(self, prefix: str) -> None:
        self._store.delete_by_prefix(self._store.container, self.build_key(prefix))

    def list_blobs_by_prefix(self, prefix: Optional[str] = None) -> Dict[str, BlobMetadata]:
        return self._store.list_by_prefix(self._store.container, self._key_prefix, prefix)

    def list_blobs(self) -> Dict[str, BlobMetadata]:
        return self.list_blobs_by_prefix(None)


__all__ = ["ShardedBlobContainer"]
