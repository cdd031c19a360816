"""Core behaviour-tree types: statuses, tick context, records and basic nodes."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from npcbrain.blackboard import Blackboard
    from npcbrain.memory import Memory


class Status(enum.IntEnum):
    """Result of a single node tick."""

    SUCCESS = 0
    FAILURE = 1
    RUNNING = 2


class NodeError(Exception):
    """Raised by a node whose tick failed; carries the status reported with the error."""

    def __init__(self, message: str, status: Status = Status.FAILURE) -> None:
        super().__init__(message)
        self.status = status


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TickContext:
    """State handed to every node during a tick."""

    bb: "Blackboard"
    memory: Optional["Memory"] = None
    clock: Callable[[], datetime] = field(default=_utcnow)


@dataclass
class DecisionRecord:
    """One entry of an agent's decision history."""

    node: str
    status: Status
    duration: timedelta
    timestamp: datetime
    metadata: Any = None


class BaseNode(ABC):
    """Common base for behaviour nodes: holds the node name."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def tick(self, t: TickContext) -> Status:
        """Run one step of the node."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ActionFunc(BaseNode):
    """Action node backed by a callable returning a Status."""

    def __init__(self, name: str, fn: Callable[[TickContext], Status]) -> None:
        super().__init__(name)
        self.fn = fn

    def tick(self, t: TickContext) -> Status:
        return self.fn(t)


class ConditionFunc(BaseNode):
    """Condition node backed by a predicate: true is success, false is failure."""

    def __init__(self, name: str, fn: Callable[[TickContext], bool]) -> None:
        super().__init__(name)
        self.fn = fn

    def tick(self, t: TickContext) -> Status:
        return Status.SUCCESS if self.fn(t) else Status.FAILURE


class Tree:
    """Decision tree holding a root node; an empty tree always succeeds."""

    def __init__(self, root: Optional[BaseNode] = None) -> None:
        self.root = root

    def tick(self, t: TickContext) -> Status:
        if self.root is None:
            return Status.SUCCESS
        return self.root.tick(t)