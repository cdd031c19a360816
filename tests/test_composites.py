import random

import pytest

from npcbrain.blackboard import Blackboard
from npcbrain.composites import (
    Parallel,
    ParallelPolicy,
    Priority,
    Random,
    Selector,
    Sequence,
)
from npcbrain.core import BaseNode, NodeError, Status, TickContext


class Scripted(BaseNode):
    def __init__(self, name, *statuses, error=None):
        super().__init__(name)
        self.statuses = list(statuses)
        self.calls = 0
        self.error = error

    def tick(self, t):
        self.calls += 1
        status = self.statuses[min(self.calls - 1, len(self.statuses) - 1)]
        if self.error is not None:
            raise NodeError(self.error, status)
        return status


@pytest.fixture
def ctx():
    return TickContext(bb=Blackboard())


def test_sequence_all_success(ctx):
    a, b = Scripted("a", Status.SUCCESS), Scripted("b", Status.SUCCESS)
    assert Sequence("s", a, b).tick(ctx) == Status.SUCCESS
    assert (a.calls, b.calls) == (1, 1)


def test_sequence_stops_on_failure(ctx):
    a, b, c = (
        Scripted("a", Status.SUCCESS),
        Scripted("b", Status.FAILURE),
        Scripted("c", Status.SUCCESS),
    )
    assert Sequence("s", a, b, c).tick(ctx) == Status.FAILURE
    assert c.calls == 0


def test_sequence_running(ctx):
    b = Scripted("b", Status.SUCCESS)
    assert Sequence("s", Scripted("a", Status.RUNNING), b).tick(ctx) == Status.RUNNING
    assert b.calls == 0


def test_sequence_empty_succeeds(ctx):
    assert Sequence("s").tick(ctx) == Status.SUCCESS


def test_sequence_error_is_failure(ctx):
    with pytest.raises(NodeError, match="boom") as info:
        Sequence("s", Scripted("a", Status.SUCCESS, error="boom")).tick(ctx)
    assert info.value.status == Status.FAILURE


def test_selector_first_success(ctx):
    a, b, c = (
        Scripted("a", Status.FAILURE),
        Scripted("b", Status.SUCCESS),
        Scripted("c", Status.SUCCESS),
    )
    assert Selector("sel", a, b, c).tick(ctx) == Status.SUCCESS
    assert c.calls == 0


def test_selector_all_fail(ctx):
    sel = Selector("sel", Scripted("a", Status.FAILURE), Scripted("b", Status.FAILURE))
    assert sel.tick(ctx) == Status.FAILURE


def test_selector_empty_fails(ctx):
    assert Selector("sel").tick(ctx) == Status.FAILURE


def test_selector_error_then_success_is_clean(ctx):
    sel = Selector(
        "sel", Scripted("a", Status.FAILURE, error="bad"), Scripted("b", Status.SUCCESS)
    )
    assert sel.tick(ctx) == Status.SUCCESS


def test_selector_reports_last_error(ctx):
    sel = Selector(
        "sel",
        Scripted("a", Status.FAILURE, error="first"),
        Scripted("b", Status.FAILURE, error="second"),
    )
    with pytest.raises(NodeError) as info:
        sel.tick(ctx)
    assert str(info.value) == "second"
    assert info.value.status == Status.FAILURE


def test_parallel_require_all(ctx):
    ok = Scripted("ok", Status.SUCCESS)
    assert Parallel("p", ParallelPolicy.REQUIRE_ALL_SUCCESS, ok, Scripted("r", Status.RUNNING)).tick(ctx) == Status.RUNNING
    assert Parallel("p", ParallelPolicy.REQUIRE_ALL_SUCCESS, ok, Scripted("f", Status.FAILURE)).tick(ctx) == Status.FAILURE
    assert Parallel("p", ParallelPolicy.REQUIRE_ALL_SUCCESS, ok, ok).tick(ctx) == Status.SUCCESS


def test_parallel_require_one(ctx):
    par = Parallel(
        "p",
        ParallelPolicy.REQUIRE_ONE_SUCCESS,
        Scripted("f", Status.FAILURE),
        Scripted("s", Status.SUCCESS),
    )
    assert par.tick(ctx) == Status.SUCCESS
    fails = Parallel("p", ParallelPolicy.REQUIRE_ONE_SUCCESS, Scripted("f", Status.FAILURE))
    assert fails.tick(ctx) == Status.FAILURE


def test_parallel_ticks_every_child(ctx):
    children = [Scripted(n, Status.FAILURE) for n in "abc"]
    Parallel("p", ParallelPolicy.REQUIRE_ALL_SUCCESS, *children).tick(ctx)
    assert [c.calls for c in children] == [1, 1, 1]


def test_parallel_empty_succeeds(ctx):
    assert Parallel("p", ParallelPolicy.REQUIRE_ALL_SUCCESS).tick(ctx) == Status.SUCCESS


def test_parallel_joins_errors(ctx):
    par = Parallel(
        "p",
        ParallelPolicy.REQUIRE_ALL_SUCCESS,
        Scripted("a", Status.FAILURE, error="x-fail"),
        Scripted("b", Status.FAILURE, error="y-fail"),
    )
    with pytest.raises(NodeError) as info:
        par.tick(ctx)
    assert "x-fail" in str(info.value) and "y-fail" in str(info.value)
    assert info.value.status == Status.FAILURE


def test_parallel_unknown_policy(ctx):
    with pytest.raises(NodeError, match="unknown parallel policy"):
        Parallel("p", 7, Scripted("a", Status.SUCCESS)).tick(ctx)


def test_random_ticks_exactly_one_child(ctx):
    a, b = Scripted("a", Status.SUCCESS), Scripted("b", Status.FAILURE)
    result = Random("r", a, b, rng=random.Random(3)).tick(ctx)
    assert a.calls + b.calls == 1
    assert result == (Status.SUCCESS if a.calls else Status.FAILURE)


def test_random_empty_succeeds(ctx):
    assert Random("r").tick(ctx) == Status.SUCCESS


def test_priority_returns_running(ctx):
    pr = Priority("p", Scripted("a", Status.FAILURE), Scripted("b", Status.RUNNING))
    assert pr.tick(ctx) == Status.RUNNING


def test_priority_keeps_earlier_errors(ctx):
    pr = Priority(
        "p", Scripted("a", Status.FAILURE, error="e1"), Scripted("b", Status.SUCCESS)
    )
    with pytest.raises(NodeError, match="e1") as info:
        pr.tick(ctx)
    assert info.value.status == Status.SUCCESS


def test_priority_all_fail(ctx):
    assert Priority("p", Scripted("a", Status.FAILURE)).tick(ctx) == Status.FAILURE


def test_set_children_replaces(ctx):
    seq = Sequence("s", Scripted("a", Status.FAILURE))
    ok = Scripted("ok", Status.SUCCESS)
    seq.set_children(ok)
    assert seq.tick(ctx) == Status.SUCCESS
    assert ok.calls == 1