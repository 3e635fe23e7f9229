"""Descriptors for existing persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError

CLONEDEV = "/dev/net/tun"
TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFNAMSIZ = 16

# struct ifreq: interface name, then a union whose first member is the flags
_IFREQ = struct.Struct(f"{IFNAMSIZ}sH22x")


class TunTapFD(FileDescriptor):
    """A descriptor on a TUN device (IP datagrams) or TAP device (Ethernet frames).

    The device must already exist, e.g. created with
    ``ip tuntap add mode tun user <user> name <devname>``.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(CLONEDEV, os.O_RDWR)
        except OSError as exc:
            raise UnixError("open", exc.errno) from exc
        super().__init__(fd)

        flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
        name = devname.encode()[: IFNAMSIZ - 1]
        request = _IFREQ.pack(name, flags)
        try:
            fcntl.ioctl(self.fd_num(), TUNSETIFF, request)
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno) from exc


class TunFD(TunTapFD):
    """A descriptor on an existing persistent TUN device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor on an existing persistent TAP device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)