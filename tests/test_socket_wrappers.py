import socket

import pytest

from sponge.address import Address
from sponge.file_descriptor import FileDescriptor
from sponge.socket_wrappers import LocalStreamSocket, TCPSocket, UDPSocket


def test_udp_oversized_datagram():
    with UDPSocket() as sock1, UDPSocket() as sock2:
        sock1.bind(Address("127.0.0.1", 0))
        sock2.sendto(sock1.local_address(), b"hi there")
        with pytest.raises(RuntimeError, match="oversized"):
            sock1.recv(4)


def test_tcp_exchange():
    with TCPSocket() as sock1, TCPSocket() as sock2:
        sock1.set_reuseaddr()
        sock1.bind(Address("127.0.0.1", 0))
        sock1.listen(1)
        sock2.connect(sock1.local_address())
        with sock1.accept() as sock3:
            sock3.write("hi there")
            recvd = sock2.read()
            sock2.write("hi yourself")
            recvd2 = sock3.read()

            assert recvd == b"hi there"
            assert recvd2 == b"hi yourself"
            assert sock3.peer_address() == sock2.local_address()
            sock3.shutdown(socket.SHUT_RDWR)
            assert sock3.read_count() == 2
            assert sock3.write_count() == 2


def test_tcp_shutdown_write_gives_peer_eof():
    with TCPSocket() as listener, TCPSocket() as client:
        listener.bind(Address("127.0.0.1", 0))
        listener.listen()
        client.connect(listener.local_address())
        with listener.accept() as server:
            client.shutdown(socket.SHUT_WR)
            assert client.write_count() == 1
            assert server.read() == b""
            assert server.eof()


def test_local_stream_socket_pair():
    left, right = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    with LocalStreamSocket(FileDescriptor(left.detach())) as pipe1, LocalStreamSocket(
        FileDescriptor(right.detach())
    ) as pipe2:
        pipe1.write("hi there")
        recvd = pipe2.read()
        pipe2.write("hi yourself")
        recvd2 = pipe1.read()
        assert recvd == b"hi there"
        assert recvd2 == b"hi yourself"


def test_domain_mismatch():
    udp = UDPSocket()
    with pytest.raises(RuntimeError, match="domain mismatch"):
        LocalStreamSocket(udp)
    udp.close()


def test_type_mismatch():
    udp = UDPSocket()
    with pytest.raises(RuntimeError, match="type mismatch"):
        TCPSocket(udp)
    udp.close()


def test_operation_on_closed_socket_raises():
    sock = UDPSocket()
    sock.close()
    with pytest.raises(OSError):
        sock.local_address()