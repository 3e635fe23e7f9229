# sponge

Building blocks for a user-space TCP/IP stack, in plain Python with no
dependencies beyond the standard library. Parts of it (`SO_DOMAIN` checks,
TUN/TAP devices) work on Linux only.

## Modules

- `sponge.byte_stream.ByteStream`: a flow-controlled, in-order byte stream
  holding at most `capacity` unread bytes. Writers call `write` (which
  returns how many bytes fit), `end_input` and `set_error`; readers call
  `peek_output`, `pop_output` and `read`, and check `buffer_size`,
  `buffer_empty`, `input_ended`, `eof` and `error`. `bytes_written`,
  `bytes_read` and `remaining_capacity` report the accounting.
- `sponge.buffer`: `Buffer` (an immutable byte string that can drop bytes
  from the front without copying), `BufferList` (a sequence of Buffers,
  with `append`, `remove_prefix`, `concatenate` and `to_buffer`) and
  `BufferViewList` (memoryviews over the same data, whose `as_views` suits
  `os.writev`).
- `sponge.parser`: `NetParser` reads big-endian `u8`, `u16` and `u32`
  values from a buffer, recording `ParseResult.PACKET_TOO_SHORT` in its
  `result` attribute instead of raising when data runs out; `NetUnparser`
  appends such values to a `bytearray`; `as_string` names a `ParseResult`.
- `sponge.util`: `InternetChecksum`, `hexdump`, `timestamp_ms`,
  `get_random_generator` and the `TaggedError` / `UnixError` exceptions
  (both subclasses of `OSError`).
- `sponge.file_descriptor.FileDescriptor`: a handle on an OS file
  descriptor, shareable through `duplicate`, that tracks EOF and closed
  state and counts reads and writes. It can be used in a `with` block.
- `sponge.address.Address`: IPv4 socket addresses. `Address(host, service)`
  resolves a name and service; `Address(ip, port)` with an integer port
  takes a numeric address without lookup. `Address.from_ipv4_numeric` and
  `ipv4_numeric` convert to and from 32-bit integers.
- `sponge.socket_wrappers`: `UDPSocket` (with `recv` returning a
  `ReceivedDatagram`, `sendto` and `send`), `TCPSocket` (with `listen` and
  `accept`) and `LocalStreamSocket` for Unix-domain stream sockets. All are
  `FileDescriptor`s.
- `sponge.tun`: `TunFD` and `TapFD` open existing persistent Linux TUN and
  TAP devices.
- `sponge.eventloop.EventLoop`: `add_rule` registers a callback for a
  descriptor becoming readable (`Direction.IN`) or writable
  (`Direction.OUT`); `wait_next_event` polls once and returns a `Result`
  (`SUCCESS`, `TIMEOUT` or `EXIT`). It raises `RuntimeError` if a callback
  neither reads nor writes its descriptor while staying interested.

## Installing

```
pip install .
```

## Examples

```python
from sponge.byte_stream import ByteStream

stream = ByteStream(15)
stream.write(b"cat")
stream.end_input()
print(stream.read(3))   # b'cat'
print(stream.eof())     # True
```

```python
from sponge.parser import NetParser, NetUnparser

buf = bytearray()
NetUnparser.u32(buf, 0xDEADBEEF)
NetUnparser.u16(buf, 0xC0C0)
parser = NetParser(bytes(buf))
assert parser.u32() == 0xDEADBEEF
assert parser.u16() == 0xC0C0
```

## Command line

`webget` resolves the `http` service on a host, sends an HTTP/1.0 `GET`
request for the path, and writes everything the server sends back to
standard output:

```
webget HOST PATH
```

For example:

```
webget example.com /index.html
```

## What it does not do

The package provides the pieces a TCP/IP stack is built from, not the
stack itself: there is no TCP sender, receiver, connection state machine
or segment reassembly, and no IP, Ethernet or ARP handling. `webget` uses
the operating system's own TCP through `TCPSocket`.

## Running the tests

```
pip install .[test]
pytest
```