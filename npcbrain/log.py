"""Structured JSON-lines logger with typed fields, levels and message sampling."""

from __future__ import annotations

import base64
import copy
import enum
import json
import math
import sys
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import IO, Any, Optional


class Level(enum.IntEnum):
    """Logging levels; only DEBUG through FATAL are distinct when logging."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    TRACE = 100
    SILENT = 101
    NONE = 0xFF


_LOGGABLE = (Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR, Level.FATAL)
_LEVEL_NAMES = {
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warn",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
}


def _normalize(level: Any) -> Level:
    """Map a level onto one of the loggable levels; anything else becomes INFO."""
    try:
        lvl = Level(level)
    except ValueError:
        return Level.INFO
    return lvl if lvl in _LOGGABLE else Level.INFO


class FieldType(enum.IntEnum):
    """How a field's value is encoded."""

    UNKNOWN = 0
    BOOL = 1
    BYTE_STRING = 2
    COMPLEX128 = 3
    COMPLEX64 = 4
    DURATION = 5
    FLOAT64 = 6
    FLOAT32 = 7
    INT = 8
    INT64 = 9
    INT32 = 10
    INT16 = 11
    INT8 = 12
    STRING = 13
    TIME = 14
    TIME_FULL = 15
    UINT = 16
    UINT64 = 17
    UINT32 = 18
    UINT16 = 19
    UINT8 = 20
    UINTPTR = 21
    ERROR = 22


@dataclass(frozen=True)
class Field:
    """A key/value pair attached to a log entry."""

    key: str
    value: Any
    type: FieldType = FieldType.UNKNOWN


def any_field(key: str, value: Any) -> Field:
    return Field(key, value, FieldType.UNKNOWN)


def bool_field(key: str, value: bool) -> Field:
    return Field(key, bool(value), FieldType.BOOL)


def bytes_field(key: str, value: bytes) -> Field:
    return Field(key, bytes(value), FieldType.BYTE_STRING)


def complex_field(key: str, value: complex) -> Field:
    return Field(key, complex(value), FieldType.COMPLEX128)


def duration_field(key: str, value: timedelta) -> Field:
    return Field(key, value, FieldType.DURATION)


def float_field(key: str, value: float) -> Field:
    return Field(key, float(value), FieldType.FLOAT64)


def int_field(key: str, value: int) -> Field:
    return Field(key, int(value), FieldType.INT)


def string_field(key: str, value: str) -> Field:
    return Field(key, str(value), FieldType.STRING)


def time_field(key: str, value: datetime) -> Field:
    return Field(key, value, FieldType.TIME)


def uint_field(key: str, value: int) -> Field:
    """An unsigned integer field; negative values are rejected."""
    number = int(value)
    if number < 0:
        raise ValueError(f"unsigned field {key!r} got negative value {number}")
    return Field(key, number, FieldType.UINT)


def error_field(value: Optional[BaseException], key: str = "error") -> Field:
    """An error field, keyed ``error`` unless another key is given."""
    return Field(key, value, FieldType.ERROR)


def _float(value: float) -> Any:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return value


def _short(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def _complex(value: complex) -> str:
    sign = "+" if value.imag >= 0 else ""
    return f"{_short(value.real)}{sign}{_short(value.imag)}i"


def _seconds(value: Any) -> float:
    return value.total_seconds() if isinstance(value, timedelta) else float(value)


def _epoch(value: Any) -> float:
    return value.timestamp() if isinstance(value, datetime) else float(value)


def _any(value: Any) -> Any:
    if isinstance(value, bool) or value is None or isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        return _float(value)
    if isinstance(value, complex):
        return _complex(value)
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, BaseException):
        return str(value)
    return value


_INT_TYPES = {
    FieldType.INT, FieldType.INT64, FieldType.INT32, FieldType.INT16, FieldType.INT8,
    FieldType.UINT, FieldType.UINT64, FieldType.UINT32, FieldType.UINT16,
    FieldType.UINT8, FieldType.UINTPTR,
}


def _encode(f: Field) -> Any:
    kind, value = f.type, f.value
    if kind == FieldType.ERROR:
        return str(value)
    if kind == FieldType.BOOL:
        return bool(value)
    if kind == FieldType.BYTE_STRING:
        return bytes(value).decode("utf-8", "replace")
    if kind in (FieldType.COMPLEX128, FieldType.COMPLEX64):
        return _complex(complex(value))
    if kind == FieldType.DURATION:
        return _seconds(value)
    if kind in (FieldType.FLOAT64, FieldType.FLOAT32):
        return _float(float(value))
    if kind in _INT_TYPES:
        return int(value)
    if kind == FieldType.STRING:
        return str(value)
    if kind in (FieldType.TIME, FieldType.TIME_FULL):
        return _epoch(value)
    return _any(value)


class _Sampler:
    """Per second, logs the first ``initial`` entries of each message, then every ``thereafter``-th."""

    def __init__(self, initial: int, thereafter: int, tick: float = 1.0) -> None:
        self.initial = initial
        self.thereafter = thereafter
        self.tick = tick
        self._counts: dict[tuple[Level, str], list[float]] = {}
        self._lock = threading.Lock()

    def allow(self, level: Level, msg: str) -> bool:
        now = time.monotonic()
        with self._lock:
            slot = self._counts.get((level, msg))
            if slot is None or now >= slot[0]:
                slot = [now + self.tick, 0]
                self._counts[(level, msg)] = slot
            slot[1] += 1
            n = int(slot[1])
        if n <= self.initial:
            return True
        return self.thereafter > 0 and (n - self.initial) % self.thereafter == 0


_inner: Optional["Logger"] = None
_inner_lock = threading.Lock()


class Logger:
    """Writes one JSON object per entry to ``stream`` (standard error by default)."""

    def __init__(self, level: Level = Level.INFO, stream: Optional[IO[str]] = None) -> None:
        global _inner
        self._level = _normalize(level)
        self._stream = stream
        self._context: tuple[Field, ...] = ()
        self._sampler = _Sampler(100, 100)
        self._lock = threading.Lock()
        with _inner_lock:
            if _inner is None:
                _inner = self

    def _emit(self, level: Level, msg: str, fields: tuple[Field, ...]) -> None:
        if level < self._level:
            return
        if not self._sampler.allow(level, msg):
            return
        entry: dict[str, Any] = {"level": _LEVEL_NAMES[level], "ts": time.time(), "msg": msg}
        for f in (*self._context, *fields):
            if f.type == FieldType.ERROR and f.value is None:
                continue
            entry[f.key] = _encode(f)
        line = json.dumps(entry, separators=(",", ":"), ensure_ascii=False, default=str)
        stream = self._stream if self._stream is not None else sys.stderr
        with self._lock:
            stream.write(line + "\n")
            stream.flush()

    def _write(self, level: Level, msg: str, fields: tuple[Field, ...]) -> None:
        self._emit(level, msg, fields)
        if level == Level.FATAL:
            raise SystemExit(1)

    def log(self, level: Level, msg: str, *fields: Field) -> None:
        """Log at ``level``; levels outside DEBUG..FATAL log as INFO."""
        self._write(_normalize(level), msg, fields)

    def debug(self, msg: str, *fields: Field) -> None:
        self._write(Level.DEBUG, msg, fields)

    def info(self, msg: str, *fields: Field) -> None:
        self._write(Level.INFO, msg, fields)

    def warn(self, msg: str, *fields: Field) -> None:
        self._write(Level.WARN, msg, fields)

    def error(self, msg: str, *fields: Field) -> None:
        self._write(Level.ERROR, msg, fields)

    def fatal(self, msg: str, *fields: Field) -> None:
        """Log the entry, then exit with status 1."""
        self._write(Level.FATAL, msg, fields)

    def with_fields(self, *fields: Field) -> "Logger":
        """A child logger that adds ``fields`` to every entry."""
        child = copy.copy(self)
        child._context = (*self._context, *fields)
        return child

    def with_context(self, ctx: Any) -> "Logger":
        """A child logger bound to ``ctx``; the context adds no fields to entries."""
        return self.with_fields()

    def set_level(self, level: Level) -> None:
        self._level = _normalize(level)

    def get_level(self) -> Level:
        return self._level


def provide() -> Logger:
    """Return the process-wide logger, creating an INFO logger if none exists."""
    global _inner
    with _inner_lock:
        existing = _inner
    if existing is None:
        logger = Logger(Level.INFO)
        with _inner_lock:
            if _inner is None:
                _inner = logger
            existing = _inner
    return existing