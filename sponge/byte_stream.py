"""A flow-controlled, in-memory, in-order byte stream."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` unread bytes. Once the writer
    ends the input, nothing more can be written.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_written = 0
        self._bytes_read = 0
        self._input_ended = False
        self._error = False

    # Writer side

    def write(self, data: BytesLike) -> int:
        """Write as much of ``data`` as fits; return how many bytes were accepted."""
        if self._input_ended:
            return 0
        accepted = min(len(data), self.remaining_capacity())
        self._buffer += memoryview(data).cast("B")[:accepted]
        self._bytes_written += accepted
        return accepted

    def remaining_capacity(self) -> int:
        """How many more bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Reader side

    def peek_output(self, length: int) -> bytes:
        """Copy up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[:length])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front."""
        count = min(length, len(self._buffer))
        del self._buffer[:count]
        self._bytes_read += count

    def read(self, length: int) -> bytes:
        """Copy and then remove up to ``length`` bytes from the front."""
        data = self.peek_output(length)
        self.pop_output(len(data))
        return data

    def input_ended(self) -> bool:
        """Whether the writer has ended the input."""
        return self._input_ended

    def error(self) -> bool:
        """Whether the stream has suffered an error."""
        return self._error

    def buffer_size(self) -> int:
        """How many bytes can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        """Whether no bytes are buffered."""
        return not self._buffer

    def eof(self) -> bool:
        """Whether the input has ended and every byte has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        """Total number of bytes accepted by ``write``."""
        return self._bytes_written

    def bytes_read(self) -> int:
        """Total number of bytes popped."""
        return self._bytes_read