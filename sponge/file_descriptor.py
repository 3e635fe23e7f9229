"""A reference-counted handle to a kernel file descriptor."""

from __future__ import annotations

import os
import sys
from typing import Union

from sponge.buffer import Buffer, BufferList, BufferViewList
from sponge.util import UnixError

_MAX_READ = 1024 * 1024

Writable = Union[str, bytes, bytearray, memoryview, Buffer, BufferList, BufferViewList]


class _FDWrapper:
    """Owns a kernel descriptor and its EOF, closed and usage state."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        try:
            if not self.closed:
                self.close()
        except Exception as exc:  # never raise from a finaliser
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a descriptor that may be shared through ``duplicate``.

    The descriptor is closed when the last handle is released, or
    explicitly through ``close`` or a ``with`` block. Reads and writes are
    counted so that an event loop can detect callbacks that do no work.
    """

    def __init__(self, fd: int) -> None:
        self._internal_fd = _FDWrapper(fd)

    def _register_read(self) -> None:
        self._internal_fd.read_count += 1

    def _register_write(self) -> None:
        self._internal_fd.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB per call); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        try:
            data = os.read(self.fd_num(), size)
        except OSError as exc:
            raise UnixError("read", exc.errno) from exc
        if size > 0 and not data:
            self._internal_fd.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write ``data``; with ``write_all`` keep going until every byte is written."""
        if isinstance(data, str):
            data = data.encode()
        buffer = data if isinstance(data, BufferViewList) else BufferViewList(data)
        total = 0
        while True:
            views = buffer.as_views() or [memoryview(b"")]
            try:
                written = os.writev(self.fd_num(), views)
            except OSError as exc:
                raise UnixError("writev", exc.errno) from exc
            if written == 0 and len(buffer) != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > len(buffer):
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            buffer.remove_prefix(written)
            total += written
            if not (write_all and len(buffer)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal_fd.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing this descriptor and its state."""
        twin = object.__new__(type(self))
        twin.__dict__.update(self.__dict__)
        return twin

    def set_blocking(self, blocking_state: bool) -> None:
        """Put the descriptor into blocking (True) or non-blocking (False) mode."""
        try:
            os.set_blocking(self.fd_num(), blocking_state)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc

    def fd_num(self) -> int:
        """The underlying descriptor number."""
        return self._internal_fd.fd

    def eof(self) -> bool:
        """Whether a read has hit end of file."""
        return self._internal_fd.eof

    def closed(self) -> bool:
        """Whether the descriptor has been closed."""
        return self._internal_fd.closed

    def read_count(self) -> int:
        """How many reads have been made."""
        return self._internal_fd.read_count

    def write_count(self) -> int:
        """How many writes have been made."""
        return self._internal_fd.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *args: object) -> None:
        if not self.closed():
            self.close()