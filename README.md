# npcbrain

Decision making for non-player characters: behavior trees, a shared
blackboard, sensors that feed it, and a memory of past decisions that can
be saved and restored. It is a library; there is no command-line tool.

## Installing

```
pip install .
```

The test suite uses pytest:

```
pip install ".[test]"
pytest
```

## Concepts

- **Blackboard** (`npcbrain.blackboard.Blackboard`): thread-safe key/value
  store for an agent's state. `get(key, default=None)`, `set`, `delete`,
  `keys()` (sorted) and `key in bb`. `namespace("combat")` gives a view over
  the same data whose keys are stored as `combat:<key>`; a `:` in the
  namespace name becomes `_`.
- **Nodes**: every node has a `name` and a `tick(t)` method that takes a
  `npcbrain.core.TickContext` (blackboard, memory, clock) and returns a
  `npcbrain.core.Status` (`SUCCESS`, `FAILURE` or `RUNNING`). A node that
  fails with an error raises; `npcbrain.core.NodeError` carries the status
  reported with the error.
  - Composites in `npcbrain.composites`: `Sequence`, `Selector`,
    `Parallel` (with `ParallelPolicy.REQUIRE_ALL_SUCCESS` or
    `REQUIRE_ONE_SUCCESS`), `Random`, `Priority`.
  - Decorators in `npcbrain.decorators`: `Repeat`, `Timer`, `Probability`,
    `Inverter`, `Succeeder`, `Cooldown`, `UntilSuccess`, `UntilFailure`.
    Each takes its child through `set_child`. `Timer` and `Cooldown` keep
    their timestamps on the blackboard under `<name>.start` and
    `<name>.last`.
  - Actions in `npcbrain.actions`: `WaitAction`, `LogAction`,
    `SetValueAction`, `CalculateAction` (`+ - * /` on two numeric keys);
    or wrap a function with `npcbrain.core.ActionFunc` / `ConditionFunc`.
  - `npcbrain.core.Tree` holds a root node; a tree without a root succeeds.
- **Sensors** (`npcbrain.sensors`): refresh the blackboard before each tick.
  `DistanceSensor` (from four coordinate keys, or from `src_key`/`dst_key`
  holding `(x, y)` pairs or objects with `x` and `y`), `InventorySensor`,
  `TimerSensor` (time may be injected under `__now_ms__`),
  `SystemResourceSensor` (writes `<out>.threads` and
  `<out>.allocated_blocks`), `NetworkSensor` and `DatabaseSensor` (which
  call `network_check` / `db_ping` callables found on the blackboard).
  A sensor that cannot read its input raises `SensorError`.
- **Registry** (`npcbrain.registry.Registry`): factories by name, so trees
  can be described in configuration. An unknown name raises
  `RegistryError`. `npcbrain.builtin_nodes.register_builtins` adds the stock
  nodes and sensors; `default_registry()` returns a shared, preloaded one.
- **Memory** (`npcbrain.memory.Memory`): history of `DecisionRecord`s.
- **Agent** (`npcbrain.agent.Agent`): runs sensors, ticks the tree and
  records a `DecisionRecord` in its memory on every `step()`. An error from
  the tree is recorded and then raised; a sensor error stops the step
  before the tree runs.
- **Helpers** (`npcbrain.learning`): `MemoryManager`, `StateManager` and
  `Analytics` (`success_rate()`, `total()`).
- **Messaging** (`npcbrain.communication`): `MessageQueue` for in-process
  `Message`s between agents (`send` blocks while full, `try_receive`
  returns `None` when empty) and `NoopNetwork`, which is never connected
  and discards what is sent.

## Describing a tree in JSON or YAML

```python
import io
from npcbrain.loader import load_json
from npcbrain.agent import build_agent_from_config
from npcbrain.builtin_nodes import default_registry
from npcbrain.core import Status

config = load_json(io.StringIO("""
{
  "root": "Root",
  "nodes": {
    "Root":    {"type": "Sequence", "children": ["IsReady", "DoWork"]},
    "IsReady": {"type": "Condition", "condition": "IsTrue", "params": {"key": "ready"}},
    "DoWork":  {"type": "Action", "action": "SetBool", "params": {"key": "done", "value": true}}
  },
  "sensors": []
}
"""))

agent = build_agent_from_config(config, default_registry())
agent.blackboard.set("ready", True)
assert agent.step() is Status.SUCCESS
assert agent.blackboard.get("done") is True
```

`load_yaml` accepts the same structure written in YAML, and
`Config.from_dict` takes already-decoded data. Node types are `Sequence`,
`Selector`, `Parallel` (params `policy: one` or `any` for "one success is
enough"), `Random`, `Priority`, `Decorator` (params `name` picks the
registered decorator, `child` names its child), `Action` and `Condition`;
the lower-case spellings work too. Sensors are listed as
`{"name": ..., "type": ..., "params": {...}}`. A malformed or unbuildable
configuration, including a cycle between nodes, raises
`npcbrain.loader.ConfigError`.

## Saving and restoring

```python
snapshot = agent.save_state()
other = build_agent_from_config(config, default_registry())
other.load_state(snapshot)
```

The snapshot holds the blackboard and the decision history. It is a
pickle, so load only snapshots you produced yourself.

## Logging

`npcbrain.log.Logger` writes one JSON object per line (to standard error
unless a stream is given) with typed fields:

```python
from npcbrain.log import Logger, Level, string_field, int_field

logger = Logger(Level.INFO)
logger.info("spawned", string_field("npc", "guard"), int_field("hp", 100))
```

`with_fields` returns a child logger that adds fields to every entry.
Repeated messages are sampled: per second, the first 100 entries of each
message are written, then every 100th. `fatal` writes the entry and exits
with status 1. `provide()` returns the process-wide logger, the first one
created.

## What it does not do

There is no event bus on the agent, no networking beyond the no-op
interface, and no persistent storage other than the byte snapshots
described above.