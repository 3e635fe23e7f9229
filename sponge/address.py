"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Any

from sponge.util import TaggedError

_AI_ALL = getattr(socket, "AI_ALL", 0)


def _resolve(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno, exc.strerror) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address, built by resolving a host and service or from raw parts.

    ``Address("www.example.com", "https")`` resolves a name and a service;
    ``Address("18.71.0.151", 53)`` takes a dotted quad and a numeric port
    without any lookup.
    """

    __slots__ = ("family", "_sockaddr")

    def __init__(self, host: str, service: str | int = 0) -> None:
        if isinstance(service, int):
            if not 0 <= service <= 0xFFFF:
                raise ValueError(f"port out of range: {service}")
            flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
            self.family, self._sockaddr = _resolve(host, str(service), flags)
        else:
            self.family, self._sockaddr = _resolve(host, service, _AI_ALL)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Any) -> Address:
        """Wrap an address as returned by the socket module for ``family``."""
        address = object.__new__(cls)
        address.family = family
        address._sockaddr = sockaddr
        return address

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """An IPv4 address (port 0) from its 32-bit numeric value."""
        packed = (ip_address & 0xFFFFFFFF).to_bytes(4, "big")
        return cls.from_sockaddr(socket.AF_INET, (socket.inet_ntoa(packed), 0))

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port."""
        if self.family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror) from exc
        return host, int(port)

    def ip(self) -> str:
        """The numeric IP address string, e.g. ``"18.243.0.1"``."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self.family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def sockaddr(self) -> Any:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.family == other.family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self.family, self._sockaddr))

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address.from_sockaddr({self.family!r}, {self._sockaddr!r})"