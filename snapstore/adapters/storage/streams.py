"""File-like adapters between the storage SDK and callers that expect streams."""

from __future__ import annotations

import io
from typing import Callable, Iterable, Iterator, List, Optional

DEFAULT_BLOCK_SIZE = 4 * 1024 * 1024


class BlobReader(io.RawIOBase):
    """Raw readable stream over an iterable of byte chunks."""

    def __init__(self, chunks: Iterable[bytes], name: str = ""):
        super().__init__()
        self.name = name
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = b""
        self._eof = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending and not self._eof:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                self._eof = True
        if not self._pending:
            return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


class BlobWriter(io.RawIOBase):
    """
    Writable stream that uploads in blocks and commits them on close.

    Nothing becomes visible in the container until ``close()`` commits the
    block list. ``abort()`` (or leaving a ``with`` block on an exception)
    discards the staged blocks instead.
    """

    def __init__(
        self,
        stage_block: Callable[[str, bytes], None],
        commit: Callable[[List[str]], None],
        *,
        name: str = "",
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        super().__init__()
        if block_size <= 0:
            raise ValueError("block_size must be positive")
        self.name = name
        self._stage_block = stage_block
        self._commit = commit
        self._block_size = block_size
        self._buffer = bytearray()
        self._block_ids: List[str] = []
        self._aborted = False

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("write to closed blob writer")
        view = memoryview(data).cast("B")
        self._buffer.extend(view)
        while len(self._buffer) >= self._block_size:
            self._flush_block(bytes(self._buffer[: self._block_size]))
            del self._buffer[: self._block_size]
        return len(view)

    def _flush_block(self, payload: bytes) -> None:
        block_id = f"block-{len(self._block_ids):08d}"
        self._stage_block(block_id, payload)
        self._block_ids.append(block_id)

    @property
    def committed(self) -> bool:
        return self.closed and not self._aborted

    def abort(self) -> None:
        """Close without committing staged blocks."""
        self._aborted = True
        self._buffer.clear()
        super().close()

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._buffer:
                self._flush_block(bytes(self._buffer))
                self._buffer.clear()
            self._commit(list(self._block_ids))
        finally:
            super().close()

    def __del__(self) -> None:
        # Unclosed writers are discarded, never committed.
        if not getattr(self, "_aborted", True) and not self.closed:
            self.abort()

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        if exc_type is not None and not self.closed:
            self.abort()
            return None
        self.close()
        return None


__all__ = ["BlobReader", "BlobWriter", "DEFAULT_BLOCK_SIZE"]
