import errno
import gc
import os

import pytest

from sponge.buffer import BufferList
from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError


@pytest.fixture
def pipe():
    rfd, wfd = os.pipe()
    reader, writer = FileDescriptor(rfd), FileDescriptor(wfd)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_write_then_read_round_trip(pipe):
    reader, writer = pipe
    data = b"hi there"
    assert writer.write(data) == len(data)
    assert reader.read() == data


def test_write_str_is_encoded(pipe):
    reader, writer = pipe
    assert writer.write("hi yourself") == len("hi yourself")
    assert reader.read() == b"hi yourself"


def test_read_respects_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(3) == b"abc"
    assert reader.read(3) == b"def"


def test_write_buffer_list(pipe):
    reader, writer = pipe
    bl = BufferList(b"ab")
    bl.append(BufferList(b"cd"))
    assert writer.write(bl) == len(bl)
    assert reader.read() == bl.concatenate()


def test_counts_increase(pipe):
    reader, writer = pipe
    writes_before = writer.write_count()
    reads_before = reader.read_count()
    writer.write(b"x")
    reader.read()
    assert writer.write_count() == writes_before + 1
    assert reader.read_count() == reads_before + 1


def test_eof_after_writer_closed(pipe):
    reader, writer = pipe
    writer.write(b"abc")
    writer.close()
    assert reader.read() == b"abc"
    assert reader.eof() is False
    assert reader.read() == b""
    assert reader.eof() is True


def test_zero_limit_read_does_not_set_eof(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read(0) == b""
    assert reader.eof() is False


def test_close_sets_flags(pipe):
    reader, _ = pipe
    reader.close()
    assert reader.closed() is True
    assert reader.eof() is True


def test_double_close_raises(pipe):
    reader, _ = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.close()
    assert info.value.attempt == "close"
    assert info.value.errno == errno.EBADF


def test_read_after_close_raises(pipe):
    reader, _ = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.attempt == "read"


def test_negative_fd_rejected():
    with pytest.raises(ValueError):
        FileDescriptor(-1)


def test_set_blocking_toggles(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    assert os.get_blocking(reader.fd_num()) is False
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.errno == errno.EAGAIN
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num()) is True


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    twin = reader.duplicate()
    assert twin.fd_num() == reader.fd_num()
    writer.write(b"abc")
    twin.read()
    assert reader.read_count() == twin.read_count()
    twin.close()
    assert reader.closed() is True


def test_last_handle_release_closes():
    rfd, wfd = os.pipe()
    try:
        fd = FileDescriptor(rfd)
        twin = fd.duplicate()
        del fd
        gc.collect()
        os.fstat(rfd)
        assert twin.closed() is False
        del twin
        gc.collect()
        with pytest.raises(OSError):
            os.fstat(rfd)
    finally:
        os.close(wfd)


def test_context_manager_closes():
    rfd, wfd = os.pipe()
    os.close(wfd)
    with FileDescriptor(rfd) as fd:
        assert fd.closed() is False
    assert fd.closed() is True
    with pytest.raises(OSError):
        os.fstat(rfd)