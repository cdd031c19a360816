"""Helpers over memory and agent state: history management, persistence and statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from npcbrain.core import DecisionRecord, Status
from npcbrain.memory import Memory

if TYPE_CHECKING:
    from npcbrain.agent import Agent


class MemoryManager:
    """Thin facade over a Memory for history operations."""

    def __init__(self, memory: Memory) -> None:
        self.memory = memory

    def append(self, rec: DecisionRecord) -> None:
        self.memory.append_decision(rec)

    def all(self) -> list[DecisionRecord]:
        return self.memory.history()

    def reset(self) -> None:
        self.memory.reset()


class StateManager:
    """Saves and restores agent state snapshots."""

    def save(self, agent: "Agent") -> bytes:
        return agent.save_state()

    def load(self, agent: "Agent", data: bytes) -> None:
        agent.load_state(data)


class Analytics:
    """Basic statistics over a decision history."""

    def __init__(self, memory: Memory) -> None:
        self.memory = memory

    def success_rate(self) -> float:
        """Share of successful decisions; 0 for an empty history."""
        history = self.memory.history()
        if not history:
            return 0.0
        successes = sum(1 for rec in history if rec.status == Status.SUCCESS)
        return successes / len(history)

    def total(self) -> int:
        return len(self.memory.history())