"""Agent: runs sensors and the decision tree, and keeps the decision history."""

from __future__ import annotations

import pickle
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from npcbrain.blackboard import Blackboard
from npcbrain.core import DecisionRecord, NodeError, Status, TickContext, Tree
from npcbrain.loader import Config, ConfigError
from npcbrain.memory import Memory
from npcbrain.registry import Registry


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Agent:
    """Coordinates sensors, a decision tree, a blackboard and a memory."""

    def __init__(
        self,
        blackboard: Optional[Blackboard] = None,
        memory: Optional[Memory] = None,
        tree: Optional[Tree] = None,
        sensors: Optional[Iterable[Any]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.blackboard = blackboard if blackboard is not None else Blackboard()
        self.memory = memory if memory is not None else Memory()
        self.tree = tree if tree is not None else Tree()
        self.sensors = list(sensors) if sensors is not None else []
        self.clock = clock if clock is not None else _now

    def step(self) -> Status:
        """Run one cycle: update sensors, tick the tree, record the decision.

        A sensor error stops the cycle before the tree runs. A tree error is
        recorded in the history and then raised.
        """
        for sensor in self.sensors:
            sensor.update(self.blackboard)
        ctx = TickContext(bb=self.blackboard, memory=self.memory, clock=self.clock)
        start = self.clock()
        error: Optional[Exception] = None
        try:
            status = self.tree.tick(ctx)
        except NodeError as exc:
            status, error = exc.status, exc
        except Exception as exc:
            status, error = Status.FAILURE, exc
        end = self.clock()
        root = self.tree.root
        self.memory.append_decision(
            DecisionRecord(
                node=root.name if root is not None else "",
                status=status,
                duration=end - start,
                timestamp=self.clock(),
            )
        )
        if error is not None:
            raise error
        return status

    def save_state(self) -> bytes:
        """Snapshot the blackboard and memory."""
        return pickle.dumps({"bb": self.blackboard.dump(), "mem": self.memory.save()})

    def load_state(self, data: bytes) -> None:
        """Restore a snapshot from :meth:`save_state`. Trusted data only."""
        try:
            state = pickle.loads(data)
        except Exception as exc:
            raise ValueError("invalid agent snapshot") from exc
        if not isinstance(state, dict):
            raise ValueError("invalid agent snapshot")
        bb_bytes = state.get("bb")
        mem_bytes = state.get("mem")
        if bb_bytes:
            self.blackboard.load(bb_bytes)
        if mem_bytes:
            self.memory.load(mem_bytes)


def build_agent_from_config(config: Optional[Config], registry: Registry) -> Agent:
    """Build an agent with fresh components from a config and a registry."""
    if config is None:
        raise ConfigError("config is nil")
    tree, sensors = config.build(registry)
    return Agent(Blackboard(), Memory(), tree, sensors)