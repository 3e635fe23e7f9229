"""Wait for readiness on file descriptors and run the matching callbacks."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """The outcome of one call to ``EventLoop.wait_next_event``."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always_interested() -> bool:
    return True


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Optional[Callback]

    def service_count(self) -> int:
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Holds rules and turns them into calls to poll.

    A rule is polled in its direction whenever its ``interest`` returns
    True, and is cancelled (its ``cancel`` callback runs, if given, and it
    is removed) once its descriptor reaches EOF, is closed, or hangs up.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always_interested,
        cancel: Optional[Callback] = None,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds."""
        self._rules.append(_Rule(fd.duplicate(), direction, callback, interest, cancel))

    def _drop(self, rule: _Rule) -> None:
        if rule.cancel is not None:
            rule.cancel()
        if rule in self._rules:
            self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once and run the callbacks of every ready rule.

        Returns EXIT when nothing is left to poll or poll was interrupted,
        TIMEOUT when no descriptor became ready within ``timeout_ms``
        (negative waits forever), and SUCCESS otherwise. Raises
        RuntimeError on a descriptor error or when a callback neither read
        nor wrote its descriptor yet stays interested.
        """
        polled: list[tuple[_Rule, int]] = []
        for rule in list(self._rules):
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                self._drop(rule)
                continue
            mask = rule.direction.value if rule.interest() else 0
            polled.append((rule, mask))

        if not any(mask for _rule, mask in polled):
            return Result.EXIT

        masks: dict[int, int] = {}
        for rule, mask in polled:
            fd_num = rule.fd.fd_num()
            masks[fd_num] = masks.get(fd_num, 0) | mask

        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            events = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.EXIT
        except OSError as exc:
            raise UnixError("poll", exc.errno) from exc

        if not events:
            return Result.TIMEOUT

        revents_by_fd = dict(events)
        for rule, mask in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            ready = bool(revents & mask)
            hangup = bool(revents & select.POLLHUP)
            if hangup and mask and not ready:
                # the only condition was a hangup: this descriptor is defunct
                self._drop(rule)
                continue

            if ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )

        return Result.SUCCESS