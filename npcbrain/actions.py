"""Simple action nodes that work on the blackboard."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from npcbrain.blackboard import get_float
from npcbrain.core import BaseNode, NodeError, Status, TickContext


class WaitAction(BaseNode):
    """Stays running until ``duration`` has passed on the tick clock."""

    def __init__(self, name: str, duration: timedelta) -> None:
        super().__init__(name)
        self.duration = duration

    def tick(self, t: TickContext) -> Status:
        key = self.name + ".start"
        start = t.bb.get(key)
        if isinstance(start, datetime):
            if t.clock() - start >= self.duration:
                t.bb.delete(key)
                return Status.SUCCESS
            return Status.RUNNING
        t.bb.set(key, t.clock())
        return Status.RUNNING


class LogAction(BaseNode):
    """Stores a message under a blackboard key."""

    def __init__(self, name: str, key: str, msg: str) -> None:
        super().__init__(name)
        self.key = key
        self.msg = msg

    def tick(self, t: TickContext) -> Status:
        t.bb.set(self.key, self.msg)
        return Status.SUCCESS


class SetValueAction(BaseNode):
    """Sets a blackboard key to a fixed value."""

    def __init__(self, name: str, key: str, value: Any) -> None:
        super().__init__(name)
        self.key = key
        self.value = value

    def tick(self, t: TickContext) -> Status:
        t.bb.set(self.key, self.value)
        return Status.SUCCESS


_OPERATIONS = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": lambda a, b: a / b,
}


class CalculateAction(BaseNode):
    """Applies ``op`` to two numeric blackboard values and stores the float result."""

    def __init__(self, name: str, op: str, left_key: str, right_key: str, out: str) -> None:
        super().__init__(name)
        self.op = op
        self.left_key = left_key
        self.right_key = right_key
        self.out = out

    def tick(self, t: TickContext) -> Status:
        left = get_float(t.bb, self.left_key)
        right = get_float(t.bb, self.right_key)
        if left is None or right is None:
            raise NodeError("calc: operands missing")
        operation = _OPERATIONS.get(self.op)
        if operation is None:
            raise NodeError(f"unknown op: {self.op}")
        if self.op == "/" and right == 0:
            raise NodeError("division by zero")
        t.bb.set(self.out, operation(left, right))
        return Status.SUCCESS