import os
import socket

import pytest

from sponge.eventloop import Direction, EventLoop, Result
from sponge.file_descriptor import FileDescriptor


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    fa = FileDescriptor(a.detach())
    fb = FileDescriptor(b.detach())
    yield fa, fb
    for fd in (fa, fb):
        if not fd.closed():
            fd.close()


@pytest.fixture
def pipe():
    r, w = os.pipe()
    fr = FileDescriptor(r)
    fw = FileDescriptor(w)
    yield fr, fw
    for fd in (fr, fw):
        if not fd.closed():
            fd.close()


def test_empty_loop_exits():
    assert EventLoop().wait_next_event(0) is Result.EXIT


def test_readable_rule_runs_callback(pair):
    fa, fb = pair
    received = []
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: received.append(fa.read(100)))
    fb.write(b"hi there")
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert received == [b"hi there"]


def test_timeout_when_nothing_ready(pair):
    fa, _fb = pair
    called = []
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: called.append(True))
    assert loop.wait_next_event(0) is Result.TIMEOUT
    assert called == []


def test_busy_wait_detected(pair):
    fa, fb = pair
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: None)
    fb.write(b"data")
    with pytest.raises(RuntimeError, match="busy wait"):
        loop.wait_next_event(1000)


def test_callback_that_loses_interest_is_not_busy_wait(pair):
    fa, fb = pair
    state = {"interested": True}
    loop = EventLoop()

    def callback():
        state["interested"] = False

    loop.add_rule(fa, Direction.IN, callback, lambda: state["interested"])
    fb.write(b"data")
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert state["interested"] is False
    assert loop.wait_next_event(0) is Result.EXIT


def test_uninterested_rules_exit(pair):
    fa, fb = pair
    called = []
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: called.append(True), lambda: False)
    fb.write(b"data")
    assert loop.wait_next_event(0) is Result.EXIT
    assert called == []


def test_eof_cancels_rule(pair):
    fa, fb = pair
    chunks = []
    cancelled = []
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: chunks.append(fa.read(100)), cancel=lambda: cancelled.append(True))
    fb.write(b"last")
    fb.close()
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert chunks == [b"last", b""]
    assert fa.eof()
    assert loop.wait_next_event(0) is Result.EXIT
    assert cancelled == [True]


def test_closed_descriptor_cancels_rule(pair):
    fa, _fb = pair
    cancelled = []
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: fa.read(1), cancel=lambda: cancelled.append(True))
    fa.close()
    assert loop.wait_next_event(0) is Result.EXIT
    assert cancelled == [True]


def test_writable_rule(pipe):
    fr, fw = pipe
    loop = EventLoop()
    state = {"pending": True}

    def callback():
        fw.write(b"payload")
        state["pending"] = False

    loop.add_rule(fw, Direction.OUT, callback, lambda: state["pending"])
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert fr.read(100) == b"payload"
    assert fw.write_count() == 1


def test_hangup_cancels_read_rule(pipe):
    fr, fw = pipe
    called = []
    cancelled = []
    loop = EventLoop()
    loop.add_rule(fr, Direction.IN, lambda: called.append(True), cancel=lambda: cancelled.append(True))
    fw.close()
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert called == []
    assert cancelled == [True]
    assert loop.wait_next_event(0) is Result.EXIT


def test_two_rules_on_same_descriptor(pair):
    fa, fb = pair
    reads = []
    writes = []
    state = {"write_pending": True}
    loop = EventLoop()
    loop.add_rule(fa, Direction.IN, lambda: reads.append(fa.read(100)))

    def do_write():
        fa.write(b"pong")
        writes.append(True)
        state["write_pending"] = False

    loop.add_rule(fa, Direction.OUT, do_write, lambda: state["write_pending"])
    fb.write(b"ping")
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert reads == [b"ping"]
    assert writes == [True]
    assert fb.read(100) == b"pong"