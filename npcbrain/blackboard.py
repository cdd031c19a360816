"""Thread-safe key/value blackboard with namespaced views."""

from __future__ import annotations

import pickle
import threading
from typing import Any, Optional

_MISSING = object()


class _Store:
    __slots__ = ("data", "lock")

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.lock = threading.RLock()


class Blackboard:
    """Shared agent state. Namespaced views store keys as ``ns:key`` in the root."""

    def __init__(self) -> None:
        self._store = _Store()
        self._prefix = ""

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}:{key}" if self._prefix else key

    def get(self, key: str, default: Any = None) -> Any:
        with self._store.lock:
            return self._store.data.get(self._full_key(key), default)

    def set(self, key: str, value: Any) -> None:
        with self._store.lock:
            self._store.data[self._full_key(key)] = value

    def delete(self, key: str) -> None:
        with self._store.lock:
            self._store.data.pop(self._full_key(key), None)

    def namespace(self, ns: str) -> "Blackboard":
        """Return a view whose keys live under ``ns:``; ':' in ``ns`` becomes '_'."""
        view = Blackboard()
        view._store = self._store
        view._prefix = ns.replace(":", "_")
        return view

    def keys(self) -> list[str]:
        """Sorted keys visible from this view."""
        with self._store.lock:
            keys = sorted(self._store.data)
        if not self._prefix:
            return keys
        pref = self._prefix + ":"
        return [k[len(pref):] for k in keys if k.startswith(pref)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._store.lock:
            return self._full_key(key) in self._store.data

    def dump(self) -> bytes:
        """Serialize the whole blackboard (all namespaces)."""
        with self._store.lock:
            return pickle.dumps(dict(self._store.data))

    def load(self, data: bytes) -> None:
        """Merge a snapshot produced by :meth:`dump` into the blackboard. Trusted data only."""
        try:
            loaded = pickle.loads(data)
        except Exception as exc:
            raise ValueError("invalid blackboard snapshot") from exc
        if not isinstance(loaded, dict):
            raise ValueError("invalid blackboard snapshot")
        with self._store.lock:
            self._store.data.update(loaded)


def get_float(bb: Blackboard, key: str) -> Optional[float]:
    """Read a numeric value as float, or None if absent or not a number."""
    value = bb.get(key, _MISSING)
    if value is _MISSING or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None