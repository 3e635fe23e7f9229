"""Byte streams, buffers, network parsing, sockets and an event loop for building a user-space TCP/IP stack."""

__version__ = "0.1.0"