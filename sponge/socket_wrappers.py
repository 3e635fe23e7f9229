"""UDP, TCP and Unix-domain stream sockets built on FileDescriptor."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar, Union

from sponge.address import Address
from sponge.buffer import Buffer, BufferList, BufferViewList
from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError

_T = TypeVar("_T")

Payload = Union[str, bytes, bytearray, memoryview, Buffer, BufferList, BufferViewList]


def _as_view_list(payload: Payload) -> BufferViewList:
    if isinstance(payload, str):
        payload = payload.encode()
    return payload if isinstance(payload, BufferViewList) else BufferViewList(payload)


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, sock_type: int, fd: FileDescriptor | int | None = None) -> None:
        if fd is None:
            try:
                raw = socket.socket(domain, sock_type)
            except OSError as exc:
                raise UnixError("socket", exc.errno) from exc
            super().__init__(raw.detach())
            return

        if isinstance(fd, FileDescriptor):
            self._internal_fd = fd._internal_fd
        else:
            super().__init__(fd)

        actual_domain = self._syscall(
            "getsockopt", lambda s: s.getsockopt(socket.SOL_SOCKET, socket.SO_DOMAIN)
        )
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        actual_type = self._syscall(
            "getsockopt", lambda s: s.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE)
        )
        if actual_type != sock_type:
            raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        sock = socket.socket(fileno=self.fd_num())
        try:
            yield sock
        finally:
            sock.detach()

    def _syscall(self, name: str, op: Callable[[socket.socket], _T]) -> _T:
        try:
            with self._borrowed() as sock:
                return op(sock)
        except OSError as exc:
            raise UnixError(name, exc.errno) from exc

    def _address(self, name: str, op: Callable[[socket.socket], Any]) -> Address:
        family, sockaddr = self._syscall(name, lambda s: (s.family, op(s)))
        return Address.from_sockaddr(family, sockaddr)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        self._syscall("bind", lambda s: s.bind(address.sockaddr()))

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        self._syscall("connect", lambda s: s.connect(address.sockaddr()))

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (SHUT_RD, SHUT_WR, SHUT_RDWR)."""
        self._syscall("shutdown", lambda s: s.shutdown(how))
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The local address of the socket."""
        return self._address("getsockname", lambda s: s.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        return self._address("getpeername", lambda s: s.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._syscall(
            "setsockopt", lambda s: s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        )


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: FileDescriptor | int | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise RuntimeError if it is larger than ``mtu``."""
        payload, _ancdata, msg_flags, source = self._syscall(
            "recvfrom", lambda s: s.recvmsg(mtu, 0, socket.MSG_TRUNC)
        )
        if msg_flags & socket.MSG_TRUNC:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(socket.AF_INET, source), payload)

    def _sendmsg(self, payload: Payload, destination: Address | None) -> None:
        views = _as_view_list(payload)
        if destination is None:
            sent = self._syscall("sendmsg", lambda s: s.sendmsg(views.as_views()))
        else:
            target = destination.sockaddr()
            sent = self._syscall("sendmsg", lambda s: s.sendmsg(views.as_views(), [], 0, target))
        if sent != len(views):
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer."""
        self._sendmsg(payload, None)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: FileDescriptor | int | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        self._syscall("listen", lambda s: s.listen(backlog))

    def accept(self) -> TCPSocket:
        """Block until a connection arrives and return a socket for it."""
        self._register_read()

        def _accept(sock: socket.socket) -> int:
            conn, _peer = sock.accept()
            return conn.detach()

        return TCPSocket(FileDescriptor(self._syscall("accept", _accept)))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket."""

    def __init__(self, fd: FileDescriptor | int) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)