"""Read-only byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """An immutable byte string with a movable start offset.

    Copies share the underlying bytes; discarding a prefix never copies.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _clone(self) -> Buffer:
        twin = Buffer()
        twin._storage = self._storage
        twin._offset = self._offset
        return twin

    def _view(self) -> memoryview:
        return memoryview(self._storage)[self._offset:]

    def at(self, n: int) -> int:
        """The byte at position ``n``."""
        if not 0 <= n < len(self):
            raise IndexError("Buffer.at")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """The contents as a new bytes object."""
        return self._storage[self._offset:]

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer::remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self._view() == other._view()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._view() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({self.copy()!r})"


class BufferList:
    """A discontiguous byte string made of Buffers, used to prepend headers without copying."""

    def __init__(self, data: Buffer | BytesLike | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if isinstance(data, Buffer):
            self._buffers.append(data._clone())
        elif data is not None:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying Buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: BufferList) -> None:
        """Append the Buffers of another BufferList."""
        self._buffers.extend(buf._clone() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Convert to a single Buffer; only possible with at most one Buffer."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise RuntimeError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across Buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList::remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def concatenate(self) -> bytes:
        """All bytes joined into one bytes object."""
        return b"".join(buf._view() for buf in self._buffers)

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, data: BufferList | Buffer | BytesLike) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            self._views.extend(buf._view() for buf in data.buffers())
        elif isinstance(data, Buffer):
            self._views.append(data._view())
        else:
            self._views.append(memoryview(data).cast("B"))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferListView::remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def as_views(self) -> list[memoryview]:
        """The views, suitable for scatter/gather calls such as ``os.writev``."""
        return list(self._views)

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)