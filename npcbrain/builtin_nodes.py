"""Built-in actions, conditions, decorators and sensors for configuration use."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping

from npcbrain.actions import LogAction, SetValueAction, WaitAction
from npcbrain.core import ActionFunc, ConditionFunc, Status, TickContext
from npcbrain.decorators import (
    Cooldown,
    Inverter,
    Probability,
    Repeat,
    Succeeder,
    Timer,
    UntilFailure,
    UntilSuccess,
)
from npcbrain.registry import Registry
from npcbrain.sensors import (
    DatabaseSensor,
    DistanceSensor,
    InventorySensor,
    NetworkSensor,
    SystemResourceSensor,
    TimerSensor,
)


def _str(params: Mapping[str, Any], name: str) -> str:
    value = params.get(name)
    return value if isinstance(value, str) else ""


def _bool(params: Mapping[str, Any], name: str, default: bool) -> bool:
    value = params.get(name)
    return value if isinstance(value, bool) else default


def _number(params: Mapping[str, Any], name: str) -> Any:
    value = params.get(name)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _int(params: Mapping[str, Any], name: str, default: int) -> int:
    value = _number(params, name)
    return int(value) if value is not None else default


def _float(params: Mapping[str, Any], name: str, default: float) -> float:
    value = _number(params, name)
    return float(value) if value is not None else default


def _millis(params: Mapping[str, Any]) -> timedelta:
    return timedelta(milliseconds=_int(params, "ms", 0))


def _is_true(params: Mapping[str, Any]) -> ConditionFunc:
    key = _str(params, "key")
    if not key:
        raise ValueError("IsTrue requires 'key'")

    def check(t: TickContext) -> bool:
        value = t.bb.get(key)
        return isinstance(value, bool) and value

    return ConditionFunc(f"IsTrue({key})", check)


def _set_bool(params: Mapping[str, Any]) -> ActionFunc:
    key = _str(params, "key")
    value = _bool(params, "value", False)
    if not key:
        raise ValueError("SetBool requires 'key'")

    def run(t: TickContext) -> Status:
        t.bb.set(key, value)
        return Status.SUCCESS

    return ActionFunc(f"SetBool({key})", run)


def _set_value(params: Mapping[str, Any]) -> SetValueAction:
    key = _str(params, "key")
    if not key:
        raise ValueError("SetValue requires key")
    return SetValueAction("SetValue", key, params.get("value"))


def _log(params: Mapping[str, Any]) -> LogAction:
    key = _str(params, "key")
    if not key:
        raise ValueError("log requires key")
    return LogAction("Log", key, _str(params, "msg"))


def _probability(params: Mapping[str, Any]) -> Probability:
    p = _number(params, "p")
    if p is None:
        p = _number(params, "prob")
    return Probability("Probability", 1.0 if p is None else float(p))


def _distance_sensor(params: Mapping[str, Any]) -> DistanceSensor:
    src_x, src_y = _str(params, "src_x"), _str(params, "src_y")
    dst_x, dst_y = _str(params, "dst_x"), _str(params, "dst_y")
    src_key, dst_key = _str(params, "src"), _str(params, "dst")
    out = _str(params, "out")
    if not out:
        raise ValueError("DistanceSensor requires 'out'")
    have_objects = bool(src_key and dst_key)
    have_scalars = all((src_x, src_y, dst_x, dst_y))
    if not have_objects and not have_scalars:
        raise ValueError(
            "DistanceSensor requires either src,dst object keys "
            "or scalar src_x,src_y,dst_x,dst_y"
        )
    sensor = DistanceSensor("DistanceSensor", src_x, src_y, dst_x, dst_y, out)
    if have_objects:
        sensor.src_key, sensor.dst_key = src_key, dst_key
    return sensor


def _inventory_sensor(params: Mapping[str, Any]) -> InventorySensor:
    key, out = _str(params, "key"), _str(params, "out")
    if not key or not out:
        raise ValueError("InventorySensor requires key,out")
    return InventorySensor("InventorySensor", key, out, _float(params, "threshold", 0.0))


def _timer_sensor(params: Mapping[str, Any]) -> TimerSensor:
    out = _str(params, "out")
    if not out:
        raise ValueError("TimerSensor requires out")
    return TimerSensor("TimerSensor", _int(params, "interval_ms", 1000), out)


def register_builtins(registry: Registry) -> None:
    """Register the built-in node and sensor factories into ``registry``."""
    registry.register_condition("IsTrue", _is_true)

    registry.register_action("SetBool", _set_bool)
    registry.register_action(
        "Noop", lambda params: ActionFunc("Noop", lambda t: Status.SUCCESS)
    )
    registry.register_action("SetValue", _set_value)
    registry.register_action("Log", _log)
    registry.register_action("Wait", lambda params: WaitAction("Wait", _millis(params)))

    registry.register_decorator(
        "Repeat",
        lambda params: Repeat(
            "Repeat", _int(params, "times", 1), _bool(params, "stop_on_failure", False)
        ),
    )
    registry.register_decorator("Timer", lambda params: Timer("Timer", _millis(params)))
    registry.register_decorator("Inverter", lambda params: Inverter("Inverter"))
    registry.register_decorator("Succeeder", lambda params: Succeeder("Succeeder"))
    registry.register_decorator(
        "Cooldown",
        lambda params: Cooldown(
            "Cooldown", _millis(params), _bool(params, "success_only", True)
        ),
    )
    registry.register_decorator("Probability", _probability)
    registry.register_decorator(
        "UntilSuccess", lambda params: UntilSuccess("UntilSuccess", _int(params, "max", 0))
    )
    registry.register_decorator(
        "UntilFailure", lambda params: UntilFailure("UntilFailure", _int(params, "max", 0))
    )

    registry.register_sensor("DistanceSensor", _distance_sensor)
    registry.register_sensor("InventorySensor", _inventory_sensor)
    registry.register_sensor("TimerSensor", _timer_sensor)
    registry.register_sensor(
        "SystemResourceSensor",
        lambda params: SystemResourceSensor(
            "SystemResourceSensor", _str(params, "out") or "system"
        ),
    )
    registry.register_sensor(
        "NetworkSensor",
        lambda params: NetworkSensor("NetworkSensor", _str(params, "out") or "network"),
    )
    registry.register_sensor(
        "DatabaseSensor",
        lambda params: DatabaseSensor("DatabaseSensor", _str(params, "out") or "db"),
    )


_DEFAULT_REGISTRY = Registry()
register_builtins(_DEFAULT_REGISTRY)


def default_registry() -> Registry:
    """Return the shared registry preloaded with the built-ins."""
    return _DEFAULT_REGISTRY