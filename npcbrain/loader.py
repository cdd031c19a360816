"""Behaviour-tree configuration: JSON/YAML loading and building trees from a registry."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import IO, Any, Mapping, Optional

import yaml

from npcbrain.composites import (
    Parallel,
    ParallelPolicy,
    Priority,
    Random,
    Selector,
    Sequence,
)
from npcbrain.core import BaseNode, Tree
from npcbrain.registry import Registry


class ConfigError(ValueError):
    """Raised when a configuration cannot be read or built."""


_COMPOSITES = {
    spelling: cls
    for cls in (Sequence, Selector, Random, Priority)
    for spelling in (cls.__name__, cls.__name__.lower())
}
_PARALLEL = ("Parallel", "parallel")
_DECORATOR = ("Decorator", "decorator")
_ACTION = ("Action", "action")
_CONDITION = ("Condition", "condition")


def _string(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{where}: '{key}' must be a string")
    return value


def _params(data: Mapping[str, Any], where: str) -> dict[str, Any]:
    value = data.get("params")
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where}: 'params' must be a mapping")
    return dict(value)


@dataclass
class ConfigNode:
    """Description of one behaviour node."""

    type: str
    children: list[str] = field(default_factory=list)
    child: str = ""
    action: str = ""
    condition: str = ""
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "ConfigNode":
        where = f"node {name}"
        if not isinstance(data, Mapping):
            raise ConfigError(f"{where}: must be a mapping")
        children = data.get("children") or []
        if not isinstance(children, list) or not all(isinstance(c, str) for c in children):
            raise ConfigError(f"{where}: 'children' must be a list of names")
        return cls(
            type=_string(data, "type", where),
            children=list(children),
            child=_string(data, "child", where),
            action=_string(data, "action", where),
            condition=_string(data, "condition", where),
            params=_params(data, where),
        )


@dataclass
class ConfigSensor:
    """Description of one sensor."""

    name: str
    type: str
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "ConfigSensor":
        if not isinstance(data, Mapping):
            raise ConfigError("sensor entry must be a mapping")
        return cls(
            name=_string(data, "name", "sensor"),
            type=_string(data, "type", "sensor"),
            params=_params(data, "sensor"),
        )


@dataclass
class Config:
    """A tree of named nodes, the name of its root and a list of sensors."""

    root: str = ""
    nodes: dict[str, ConfigNode] = field(default_factory=dict)
    sensors: list[ConfigSensor] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Config":
        """Build a config from decoded JSON or YAML data; ``None`` gives an empty config."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigError("config must be a mapping")
        nodes = data.get("nodes") or {}
        if not isinstance(nodes, Mapping):
            raise ConfigError("'nodes' must be a mapping")
        sensors = data.get("sensors") or []
        if not isinstance(sensors, list):
            raise ConfigError("'sensors' must be a list")
        return cls(
            root=_string(data, "root", "config"),
            nodes={str(name): ConfigNode.from_dict(str(name), node) for name, node in nodes.items()},
            sensors=[ConfigSensor.from_dict(s) for s in sensors],
        )

    def build(self, registry: Registry) -> tuple[Tree, list[Any]]:
        """Instantiate the tree and the sensors; each named node is created once."""
        if not self.root:
            return Tree(), []
        created: dict[str, BaseNode] = {}
        building: set[str] = set()

        def build_node(name: str) -> BaseNode:
            if name in created:
                return created[name]
            nc = self.nodes.get(name)
            if nc is None:
                raise ConfigError(f"unknown node in config: {name}")
            if name in building:
                raise ConfigError(f"cycle in config at node: {name}")
            building.add(name)
            try:
                node = make(name, nc)
            finally:
                building.discard(name)
            created[name] = node
            return node

        def make(name: str, nc: ConfigNode) -> BaseNode:
            composite = _COMPOSITES.get(nc.type)
            if composite is not None:
                node = composite(name)
                node.set_children(*(build_node(c) for c in nc.children))
                return node
            if nc.type in _PARALLEL:
                policy = ParallelPolicy.REQUIRE_ALL_SUCCESS
                if nc.params.get("policy") in ("one", "any"):
                    policy = ParallelPolicy.REQUIRE_ONE_SUCCESS
                par = Parallel(name, policy)
                par.set_children(*(build_node(c) for c in nc.children))
                return par
            if nc.type in _DECORATOR:
                dec_name = nc.params.get("name")
                decorator = registry.new_decorator(
                    dec_name if isinstance(dec_name, str) else "", nc.params
                )
                if not nc.child:
                    raise ConfigError(f"decorator {name} requires child")
                decorator.set_child(build_node(nc.child))
                return decorator
            if nc.type in _ACTION:
                return registry.new_action(nc.action, nc.params)
            if nc.type in _CONDITION:
                return registry.new_condition(nc.condition, nc.params)
            raise ConfigError(f"unsupported node type: {nc.type}")

        root = build_node(self.root)
        sensors = []
        for spec in self.sensors:
            try:
                sensors.append(registry.new_sensor(spec.type, spec.params))
            except (LookupError, ValueError, TypeError) as exc:
                raise ConfigError(f"sensor {spec.name}: {exc}") from exc
        return Tree(root), sensors


def load_json(stream: IO[Any]) -> Config:
    """Read a config from a JSON text or binary stream."""
    try:
        data = json.load(stream)
    except ValueError as exc:
        raise ConfigError(f"invalid JSON config: {exc}") from exc
    return Config.from_dict(data)


def load_yaml(stream: IO[Any]) -> Config:
    """Read a config from a YAML stream; an empty document is an error."""
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML config: {exc}") from exc
    if data is None:
        raise ConfigError("empty YAML config")
    return Config.from_dict(data)