"""In-process messaging between agents and a no-op network interface."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Message:
    """A typed message with arbitrary payload."""

    type: str
    data: Any = None


class _Pending:
    __slots__ = ("msg", "taken")

    def __init__(self, msg: Message) -> None:
        self.msg = msg
        self.taken = False


class MessageQueue:
    """FIFO queue holding up to ``buffer`` messages.

    ``send`` blocks while the queue is full; with a buffer of 0 it blocks
    until a receiver takes the message.
    """

    def __init__(self, buffer: int = 0) -> None:
        if buffer < 0:
            raise ValueError("buffer must not be negative")
        self.buffer = buffer
        self._items: deque[Message] = deque()
        self._waiting: deque[_Pending] = deque()
        self._cond = threading.Condition()

    def send(self, msg: Message) -> None:
        with self._cond:
            if self.buffer > 0:
                while len(self._items) >= self.buffer:
                    self._cond.wait()
                self._items.append(msg)
                self._cond.notify_all()
                return
            pending = _Pending(msg)
            self._waiting.append(pending)
            self._cond.notify_all()
            while not pending.taken:
                self._cond.wait()

    def try_receive(self) -> Optional[Message]:
        """Take the next message without blocking, or return None."""
        with self._cond:
            if self._items:
                msg = self._items.popleft()
                self._cond.notify_all()
                return msg
            if self._waiting:
                pending = self._waiting.popleft()
                pending.taken = True
                self._cond.notify_all()
                return pending.msg
            return None


@dataclass
class NoopNetwork:
    """Network interface that is never connected and drops everything sent.

    ``dropped`` counts the payloads that were sent and discarded.
    """

    dropped: int = 0

    def is_connected(self) -> bool:
        return False

    def send(self, payload: Any) -> None:
        """Discard ``payload``; sending never fails."""
        self.dropped += 1