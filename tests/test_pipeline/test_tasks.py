"""Tests for the sequential task list."""

from __future__ import annotations

import pytest

from spritely.events import EventBus, TaskCompleted, TaskStarted
from spritely.pipeline import SequentialTasks


class TestSequentialTasks:
    def test_runs_in_order(self):
        calls = []
        tasks = SequentialTasks()
        for name in ("one", "two", "three"):
            tasks.add(name, lambda name=name: calls.append(name) or name.upper())
        assert len(tasks) == 3
        assert tasks.run() == ["ONE", "TWO", "THREE"]
        assert calls == ["one", "two", "three"]

    def test_done_fires_after_last_task(self):
        order = []
        tasks = SequentialTasks()
        tasks.add("a", lambda: order.append("a"))
        tasks.add("b", lambda: order.append("b"))
        tasks.run(on_done=lambda: order.append("done"))
        assert order == ["a", "b", "done"]

    def test_done_fires_for_empty_list(self):
        done = []
        assert SequentialTasks().run(on_done=lambda: done.append(True)) == []
        assert done == [True]

    def test_failure_stops_the_run(self):
        calls = []
        done = []
        tasks = SequentialTasks()
        tasks.add("ok", lambda: calls.append("ok"))
        tasks.add("boom", lambda: 1 / 0)
        tasks.add("never", lambda: calls.append("never"))
        with pytest.raises(ZeroDivisionError):
            tasks.run(on_done=lambda: done.append(True))
        assert calls == ["ok"]
        assert done == []

    def test_emits_task_events(self):
        bus = EventBus()
        seen = []
        bus.on_all(seen.append)
        tasks = SequentialTasks(bus)
        tasks.add("only", lambda: None)
        tasks.run()
        assert seen == [TaskStarted(name="only"), TaskCompleted(name="only")]
