"""Fetch a URL path over HTTP/1.0 and print the server's reply."""

from __future__ import annotations

import socket
import sys
from typing import BinaryIO, Sequence

from sponge.address import Address
from sponge.socket_wrappers import TCPSocket

_READ_LIMIT = 100


def get_url(host: str, path: str, out: BinaryIO | None = None) -> None:
    """Request ``path`` from the ``http`` service on ``host`` and write everything it sends back."""
    stream = sys.stdout.buffer if out is None else out
    address = Address(host, "http")
    request = f"GET {path} HTTP/1.0\r\nHost: {host}\r\n\r\n"

    chunks: list[bytes] = []
    with TCPSocket() as sock:
        sock.connect(address)
        sock.write(request)
        sock.shutdown(socket.SHUT_WR)
        while not sock.eof():
            chunks.append(sock.read(_READ_LIMIT))

    stream.write(b"".join(chunks) + b"\n")
    stream.flush()


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point: ``webget HOST PATH``."""
    args = list(sys.argv[1:] if argv is None else argv)
    prog = "webget"
    if len(args) != 2:
        sys.stderr.write(f"Usage: {prog} HOST PATH\n")
        sys.stderr.write(f"\tExample: {prog} stanford.edu /class/cs144\n")
        return 1
    host, path = args
    try:
        get_url(host, path)
    except Exception as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())