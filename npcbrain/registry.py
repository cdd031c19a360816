"""Name-based registry of node and sensor factories."""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping, Optional

Factory = Callable[[dict[str, Any]], Any]


class RegistryError(LookupError):
    """Raised when no factory is registered under a requested name."""


class Registry:
    """Maps names to factories that build actions, conditions, decorators, composites and sensors."""

    _KINDS = ("action", "condition", "decorator", "composite", "sensor")

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._factories: dict[str, dict[str, Factory]] = {kind: {} for kind in self._KINDS}

    def _register(self, kind: str, name: str, factory: Factory) -> None:
        with self._lock:
            self._factories[kind][name] = factory

    def _create(self, kind: str, name: str, params: Optional[Mapping[str, Any]]) -> Any:
        with self._lock:
            factory = self._factories[kind].get(name)
        if factory is None:
            raise RegistryError(f"unknown {kind}: {name}")
        return factory(dict(params) if params else {})

    def register_action(self, name: str, factory: Factory) -> None:
        self._register("action", name, factory)

    def register_condition(self, name: str, factory: Factory) -> None:
        self._register("condition", name, factory)

    def register_decorator(self, name: str, factory: Factory) -> None:
        self._register("decorator", name, factory)

    def register_composite(self, name: str, factory: Factory) -> None:
        self._register("composite", name, factory)

    def register_sensor(self, name: str, factory: Factory) -> None:
        self._register("sensor", name, factory)

    def new_action(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._create("action", name, params)

    def new_condition(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._create("condition", name, params)

    def new_decorator(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._create("decorator", name, params)

    def new_composite(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._create("composite", name, params)

    def new_sensor(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._create("sensor", name, params)