"""Decision history storage with binary persistence."""

from __future__ import annotations

import pickle
import threading

from npcbrain.core import DecisionRecord


class Memory:
    """Thread-safe, append-only list of decision records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[DecisionRecord] = []

    def append_decision(self, rec: DecisionRecord) -> None:
        with self._lock:
            self._records.append(rec)

    def history(self) -> list[DecisionRecord]:
        """Return a copy of the recorded history."""
        with self._lock:
            return list(self._records)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()

    def save(self) -> bytes:
        with self._lock:
            return pickle.dumps(list(self._records))

    def load(self, data: bytes) -> None:
        """Replace the history with a snapshot produced by :meth:`save`. Trusted data only."""
        try:
            loaded = pickle.loads(data)
        except Exception as exc:
            raise ValueError("invalid memory snapshot") from exc
        if not isinstance(loaded, list) or not all(
            isinstance(r, DecisionRecord) for r in loaded
        ):
            raise ValueError("invalid memory snapshot")
        with self._lock:
            self._records = loaded