from datetime import datetime, timedelta, timezone

import pytest

from npcbrain.blackboard import Blackboard
from npcbrain.core import (
    ActionFunc,
    BaseNode,
    ConditionFunc,
    DecisionRecord,
    NodeError,
    Status,
    TickContext,
    Tree,
)


@pytest.fixture
def ctx():
    return TickContext(bb=Blackboard())


def test_status_values_follow_declaration_order():
    assert [Status(i) for i in range(3)] == [Status.SUCCESS, Status.FAILURE, Status.RUNNING]


def test_node_error_defaults_to_failure():
    err = NodeError("boom")
    assert err.status is Status.FAILURE
    assert str(err) == "boom"


def test_node_error_keeps_given_status():
    assert NodeError("x", Status.RUNNING).status is Status.RUNNING


def test_action_func_returns_callable_result(ctx):
    node = ActionFunc("act", lambda t: Status.RUNNING)
    assert node.tick(ctx) is Status.RUNNING
    assert node.name == "act"


def test_action_func_sees_blackboard(ctx):
    def fn(t):
        t.bb.set("hit", True)
        return Status.SUCCESS

    assert ActionFunc("a", fn).tick(ctx) is Status.SUCCESS
    assert ctx.bb.get("hit") is True


@pytest.mark.parametrize("value,expected", [(True, Status.SUCCESS), (False, Status.FAILURE)])
def test_condition_func_maps_bool(ctx, value, expected):
    assert ConditionFunc("c", lambda t: value).tick(ctx) is expected


def test_condition_func_propagates_error(ctx):
    def fn(t):
        raise NodeError("bad")

    with pytest.raises(NodeError) as info:
        ConditionFunc("c", fn).tick(ctx)
    assert info.value.status is Status.FAILURE


def test_empty_tree_succeeds(ctx):
    tree = Tree()
    assert tree.root is None
    assert tree.tick(ctx) is Status.SUCCESS


def test_tree_delegates_to_root(ctx):
    root = ActionFunc("r", lambda t: Status.FAILURE)
    tree = Tree(root)
    assert tree.root is root
    assert tree.tick(ctx) is Status.FAILURE


def test_base_node_is_abstract():
    with pytest.raises(TypeError):
        BaseNode("x")


def test_tick_context_default_clock_is_current(ctx):
    before = datetime.now(timezone.utc)
    now = ctx.clock()
    after = datetime.now(timezone.utc)
    assert before <= now <= after


def test_decision_record_fields():
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rec = DecisionRecord("Root", Status.SUCCESS, timedelta(milliseconds=5), ts)
    assert rec.node == "Root"
    assert rec.metadata is None
    assert rec == DecisionRecord("Root", Status.SUCCESS, timedelta(milliseconds=5), ts)