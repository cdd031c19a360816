"""Decorator nodes that wrap a single child and alter its behaviour."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Optional

from npcbrain.composites import _capture, _finish, _raise_with
from npcbrain.core import BaseNode, NodeError, Status, TickContext


class _Decorator(BaseNode):
    _label = "decorator"
    child: Optional[BaseNode] = None

    def _require_child(self) -> BaseNode:
        if self.child is None:
            raise NodeError(f"{self._label}: child is not set")
        return self.child


class Repeat(_Decorator):
    """Ticks the child up to ``times`` times in one tick."""

    _label = "repeat"

    def __init__(self, name: str, times: int = 1, stop_on_failure: bool = False) -> None:
        super().__init__(name)
        self.child = None
        self.times = times
        self.stop_on_failure = stop_on_failure

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        child = self._require_child()
        for _ in range(self.times):
            status, err = _capture(child, t)
            if err is not None:
                _raise_with(Status.FAILURE, err)
            if status == Status.RUNNING:
                return Status.RUNNING
            if status == Status.FAILURE and self.stop_on_failure:
                return Status.FAILURE
        return Status.SUCCESS


class Timer(_Decorator):
    """Stays running until ``duration`` has passed, then ticks the child once."""

    _label = "timer"

    def __init__(self, name: str, duration: timedelta) -> None:
        super().__init__(name)
        self.child = None
        self.duration = duration

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        child = self._require_child()
        key = self.name + ".start"
        now = t.clock()
        if key not in t.bb:
            t.bb.set(key, now)
            return Status.RUNNING
        start = t.bb.get(key)
        if isinstance(start, datetime) and now - start < self.duration:
            return Status.RUNNING
        try:
            return child.tick(t)
        finally:
            t.bb.delete(key)


class Probability(_Decorator):
    """Ticks the child with probability ``p``; otherwise fails."""

    _label = "probability"

    def __init__(self, name: str, p: float = 1.0, rng: Optional[random.Random] = None) -> None:
        super().__init__(name)
        self.child = None
        self.p = p
        self._rng = rng if rng is not None else random.Random()

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        child = self._require_child()
        if self.p <= 0:
            return Status.FAILURE
        if self.p >= 1 or self._rng.random() <= self.p:
            return child.tick(t)
        return Status.FAILURE


class Inverter(_Decorator):
    """Swaps success and failure; running passes through."""

    _label = "inverter"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.child = None

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        status, err = _capture(self._require_child(), t)
        flipped = {Status.SUCCESS: Status.FAILURE, Status.FAILURE: Status.SUCCESS}
        return _finish(flipped.get(status, status), err)


class Succeeder(_Decorator):
    """Succeeds unless the child is running; succeeds without a child."""

    _label = "succeeder"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.child = None

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        if self.child is None:
            return Status.SUCCESS
        status, err = _capture(self.child, t)
        if status == Status.RUNNING:
            return _finish(Status.RUNNING, err)
        return _finish(Status.SUCCESS, err)


class Cooldown(_Decorator):
    """Fails without ticking the child until ``duration`` has passed since the last run."""

    _label = "cooldown"

    def __init__(self, name: str, duration: timedelta, success_only: bool = True) -> None:
        super().__init__(name)
        self.child = None
        self.duration = duration
        self.success_only = success_only

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        child = self._require_child()
        key = self.name + ".last"
        now = t.clock()
        last = t.bb.get(key)
        if isinstance(last, datetime) and now - last < self.duration:
            return Status.FAILURE
        status, err = _capture(child, t)
        if self.success_only:
            if status == Status.SUCCESS:
                t.bb.set(key, now)
        elif status != Status.RUNNING:
            t.bb.set(key, now)
        return _finish(status, err)


class UntilSuccess(_Decorator):
    """Repeats the child until it succeeds; ``max_attempts`` of 0 means no limit."""

    _label = "until-success"

    def __init__(self, name: str, max_attempts: int = 0) -> None:
        super().__init__(name)
        self.child = None
        self.max_attempts = max_attempts

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        child = self._require_child()
        attempts = 0
        while True:
            status, err = _capture(child, t)
            if err is not None:
                _raise_with(Status.FAILURE, err)
            if status in (Status.SUCCESS, Status.RUNNING):
                return status
            attempts += 1
            if 0 < self.max_attempts <= attempts:
                return Status.FAILURE


class UntilFailure(_Decorator):
    """Repeats the child until it fails, then succeeds; ``max_attempts`` of 0 means no limit."""

    _label = "until-failure"

    def __init__(self, name: str, max_attempts: int = 0) -> None:
        super().__init__(name)
        self.child = None
        self.max_attempts = max_attempts

    def set_child(self, child: BaseNode) -> None:
        """Set the wrapped child node."""
        self.child = child

    def tick(self, t: TickContext) -> Status:
        child = self._require_child()
        attempts = 0
        while True:
            status, err = _capture(child, t)
            if err is not None:
                _raise_with(Status.FAILURE, err)
            if status == Status.FAILURE:
                return Status.SUCCESS
            if status == Status.RUNNING:
                return Status.RUNNING
            attempts += 1
            if 0 < self.max_attempts <= attempts:
                return Status.SUCCESS