"""Sensors that read the outside world and write the results to the blackboard."""

from __future__ import annotations

import math
import sys
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from npcbrain.blackboard import Blackboard, get_float


class SensorError(Exception):
    """Raised when a sensor cannot read the data it needs."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _point(value: Any) -> Optional[tuple[float, float]]:
    """Interpret a value as a 2D point: a pair of numbers or an object with x and y."""
    if isinstance(value, (tuple, list)) and len(value) == 2:
        x, y = value
    else:
        x, y = getattr(value, "x", None), getattr(value, "y", None)
    if _is_number(x) and _is_number(y):
        return float(x), float(y)
    return None


class _Sensor(ABC):
    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def update(self, bb: Blackboard) -> None:
        """Refresh the blackboard from this sensor's source."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class DistanceSensor(_Sensor):
    """Writes the distance between two points to ``out``.

    Points are read from the object keys ``src_key``/``dst_key`` when both are set
    and hold points, otherwise from four scalar coordinate keys.
    """

    def __init__(
        self, name: str, src_x: str, src_y: str, dst_x: str, dst_y: str, out: str
    ) -> None:
        super().__init__(name)
        self.src_x = src_x
        self.src_y = src_y
        self.dst_x = dst_x
        self.dst_y = dst_y
        self.out = out
        self.src_key = ""
        self.dst_key = ""

    def update(self, bb: Blackboard) -> None:
        if self.src_key and self.dst_key and self.src_key in bb and self.dst_key in bb:
            src = _point(bb.get(self.src_key))
            dst = _point(bb.get(self.dst_key))
            if src is not None and dst is not None:
                bb.set(self.out, math.hypot(dst[0] - src[0], dst[1] - src[1]))
                return
        x1, y1, x2, y2 = (
            get_float(bb, key) for key in (self.src_x, self.src_y, self.dst_x, self.dst_y)
        )
        if x1 is None or y1 is None or x2 is None or y2 is None:
            raise SensorError("distance sensor missing coordinates or objects")
        bb.set(self.out, math.hypot(x2 - x1, y2 - y1))


class InventorySensor(_Sensor):
    """Writes whether the quantity under ``inv_key`` reaches ``threshold``."""

    def __init__(self, name: str, inv_key: str, out: str, threshold: float) -> None:
        super().__init__(name)
        self.inv_key = inv_key
        self.out = out
        self.threshold = threshold

    def update(self, bb: Blackboard) -> None:
        value = get_float(bb, self.inv_key)
        if value is None:
            raise SensorError("inventory sensor: invalid inv value type")
        bb.set(self.out, value >= self.threshold)


class TimerSensor(_Sensor):
    """Sets ``out`` to true once per ``interval_ms``, false in between.

    The current time in milliseconds may be injected under ``__now_ms__``.
    """

    def __init__(self, name: str, interval_ms: int, out: str) -> None:
        super().__init__(name)
        self.interval_ms = interval_ms
        self.out = out

    def update(self, bb: Blackboard) -> None:
        key = self.name + ".last"
        now_ms = bb.get("__now_ms__")
        if not _is_int(now_ms):
            now_ms = time.time_ns() // 1_000_000
        last = bb.get(key)
        if _is_int(last) and now_ms - self.interval_ms < last:
            bb.set(self.out, False)
            return
        bb.set(self.out, True)
        bb.set(key, now_ms)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SystemResourceSensor(_Sensor):
    """Writes the live thread count and allocated memory blocks under ``out``."""

    def __init__(self, name: str, out: str) -> None:
        super().__init__(name)
        self.out = out

    def update(self, bb: Blackboard) -> None:
        bb.set(self.out + ".threads", threading.active_count())
        bb.set(self.out + ".allocated_blocks", sys.getallocatedblocks())


class NetworkSensor(_Sensor):
    """Writes network health to ``out.ok`` from ``network_check`` or ``network.ok``."""

    def __init__(self, name: str, out: str) -> None:
        super().__init__(name)
        self.out = out

    def update(self, bb: Blackboard) -> None:
        check = bb.get("network_check")
        if callable(check):
            bb.set(self.out + ".ok", bool(check()))
            return
        flag = bb.get("network.ok")
        bb.set(self.out + ".ok", flag if isinstance(flag, bool) else False)


class DatabaseSensor(_Sensor):
    """Writes database health to ``out.ok`` by calling ``db_ping``; a raise means down."""

    def __init__(self, name: str, out: str) -> None:
        super().__init__(name)
        self.out = out

    def update(self, bb: Blackboard) -> None:
        ping = bb.get("db_ping")
        if not callable(ping):
            bb.set(self.out + ".ok", False)
            return
        try:
            ping()
        except Exception:
            bb.set(self.out + ".ok", False)
        else:
            bb.set(self.out + ".ok", True)