"""Composite behaviour nodes: sequence, selector, parallel, random and priority."""

from __future__ import annotations

import enum
import random
from typing import NoReturn, Optional

from npcbrain.core import BaseNode, NodeError, Status, TickContext


def _capture(child: BaseNode, t: TickContext) -> tuple[Status, Optional[Exception]]:
    """Tick a child and return its status together with any error it raised."""
    try:
        return child.tick(t), None
    except NodeError as exc:
        return exc.status, exc
    except Exception as exc:
        return Status.FAILURE, exc


def _raise_with(status: Status, err: Exception) -> NoReturn:
    """Raise ``err`` so that it reports ``status``."""
    if isinstance(err, NodeError):
        if err.status == status:
            raise err
    elif status == Status.FAILURE:
        raise err
    raise NodeError(str(err), status) from err


def _finish(status: Status, err: Optional[Exception]) -> Status:
    if err is None:
        return status
    _raise_with(status, err)


def _joined(errors: list[Exception]) -> Optional[Exception]:
    if not errors:
        return None
    if len(errors) == 1:
        return errors[0]
    joined = NodeError("\n".join(str(e) for e in errors))
    joined.errors = list(errors)
    joined.__cause__ = errors[0]
    return joined


class Sequence(BaseNode):
    """Runs children in order until one fails or is running; succeeds if all succeed."""

    def __init__(self, name: str, *children: BaseNode) -> None:
        super().__init__(name)
        self.children: list[BaseNode] = list(children)

    def set_children(self, *children: BaseNode) -> None:
        """Replace the children of this node."""
        self.children = list(children)

    def tick(self, t: TickContext) -> Status:
        for child in self.children:
            status, err = _capture(child, t)
            if err is not None:
                _raise_with(Status.FAILURE, err)
            if status != Status.SUCCESS:
                return status
        return Status.SUCCESS


class Selector(BaseNode):
    """Runs children in order until one succeeds or is running; fails if all fail."""

    def __init__(self, name: str, *children: BaseNode) -> None:
        super().__init__(name)
        self.children: list[BaseNode] = list(children)

    def set_children(self, *children: BaseNode) -> None:
        """Replace the children of this node."""
        self.children = list(children)

    def tick(self, t: TickContext) -> Status:
        last_err: Optional[Exception] = None
        for child in self.children:
            status, err = _capture(child, t)
            if err is not None:
                last_err = err
            if status in (Status.SUCCESS, Status.RUNNING):
                return _finish(status, err)
        return _finish(Status.FAILURE, last_err)


class ParallelPolicy(enum.IntEnum):
    """How a Parallel node combines the results of its children."""

    REQUIRE_ALL_SUCCESS = 0
    REQUIRE_ONE_SUCCESS = 1


class Parallel(BaseNode):
    """Ticks every child and decides the result by its policy."""

    def __init__(self, name: str, policy: ParallelPolicy, *children: BaseNode) -> None:
        super().__init__(name)
        self.policy = policy
        self.children: list[BaseNode] = list(children)

    def set_children(self, *children: BaseNode) -> None:
        """Replace the children of this node."""
        self.children = list(children)

    def tick(self, t: TickContext) -> Status:
        if not self.children:
            return Status.SUCCESS
        successes = 0
        any_running = False
        errors: list[Exception] = []
        for child in self.children:
            status, err = _capture(child, t)
            if err is not None:
                errors.append(err)
            if status == Status.SUCCESS:
                successes += 1
            elif status == Status.RUNNING:
                any_running = True
        err = _joined(errors)
        if self.policy == ParallelPolicy.REQUIRE_ALL_SUCCESS:
            done = successes == len(self.children)
        elif self.policy == ParallelPolicy.REQUIRE_ONE_SUCCESS:
            done = successes > 0
        else:
            raise NodeError("unknown parallel policy")
        if done:
            return _finish(Status.SUCCESS, err)
        if any_running:
            return _finish(Status.RUNNING, err)
        return _finish(Status.FAILURE, err)


class Random(BaseNode):
    """Ticks one randomly chosen child; succeeds when there are no children."""

    def __init__(
        self, name: str, *children: BaseNode, rng: Optional[random.Random] = None
    ) -> None:
        super().__init__(name)
        self.children: list[BaseNode] = list(children)
        self._rng = rng if rng is not None else random.Random()

    def set_children(self, *children: BaseNode) -> None:
        """Replace the children of this node."""
        self.children = list(children)

    def tick(self, t: TickContext) -> Status:
        if not self.children:
            return Status.SUCCESS
        return self._rng.choice(self.children).tick(t)


class Priority(BaseNode):
    """Runs children in order and returns on the first non-failure, collecting errors."""

    def __init__(self, name: str, *children: BaseNode) -> None:
        super().__init__(name)
        self.children: list[BaseNode] = list(children)

    def set_children(self, *children: BaseNode) -> None:
        """Replace the children of this node."""
        self.children = list(children)

    def tick(self, t: TickContext) -> Status:
        errors: list[Exception] = []
        for child in self.children:
            status, err = _capture(child, t)
            if err is not None:
                errors.append(err)
            if status in (Status.SUCCESS, Status.RUNNING):
                return _finish(status, _joined(errors))
        return _finish(Status.FAILURE, _joined(errors))