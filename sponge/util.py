"""Error types, the Internet checksum, timing and hexdump helpers."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import TextIO

_PROGRAM_START = time.monotonic()


class TaggedError(OSError):
    """An OSError that also records what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A failed system call, tagged with the call's name."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error, os.strerror(error))


def timestamp_ms() -> int:
    """Milliseconds elapsed since the module was loaded (monotonic clock)."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded from the system entropy source."""
    return random.Random(os.urandom(624 * 4))


class InternetChecksum:
    """The 16-bit one's-complement Internet checksum.

    Evaluating the checksum over data that already contains a correct
    checksum field yields zero.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data: bytes | bytearray | memoryview) -> None:
        """Feed more bytes into the running sum."""
        total = self._sum
        parity = self._parity
        for byte in bytes(data):
            total += byte if parity else byte << 8
            parity = not parity
        self._sum = total & 0xFFFFFFFF
        self._parity = parity

    def value(self) -> int:
        """The checksum of everything added so far, in host byte order."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def hexdump(data: bytes | bytearray | memoryview, indent: int = 0, file: TextIO | None = None) -> None:
    """Print a hex and ASCII dump of ``data``, sixteen bytes per line."""
    out = sys.stdout if file is None else file
    indent_string = " " * indent
    parts: list[str] = []
    chars = ""
    printed = 0
    for byte in bytes(data):
        if printed & 0xF == 0:
            if printed:
                parts.append(f"    {chars or ' '}\n")
                chars = ""
            parts.append(f"{indent_string}{printed:08x}:    ")
        elif printed & 1 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars += _printable(byte)
        printed += 1
    print_rem = (16 - (printed & 0xF)) % 16
    parts.append(" " * (2 * print_rem + print_rem // 2 + 4))
    parts.append(chars or " ")
    parts.append("\n\n")
    out.write("".join(parts))
    out.flush()