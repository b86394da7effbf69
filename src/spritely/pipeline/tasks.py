"""Run units of I/O work strictly one after another."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from spritely.events import types as events
from spritely.events.bus import EventBus


@dataclass(frozen=True)
class Task:
    name: str
    fn: Callable[[], Any]


class SequentialTasks:
    """Ordered task list; each task finishes before the next one starts.

    ``run`` fires ``on_done`` once after the last task, or straight away
    when the list is empty. An exception from a task stops the run and
    propagates; ``on_done`` is not called then.
    """

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._tasks: list[Task] = []
        self._event_bus = event_bus or EventBus()

    def add(self, name: str, fn: Callable[[], Any]) -> None:
        self._tasks.append(Task(name=name, fn=fn))

    def run(self, on_done: Callable[[], None] | None = None) -> list[Any]:
        results: list[Any] = []
        for task in self._tasks:
            self._event_bus.emit(events.TaskStarted(name=task.name))
            results.append(task.fn())
            self._event_bus.emit(events.TaskCompleted(name=task.name))
        if on_done is not None:
            on_done()
        return results

    def __len__(self) -> int:
        return len(self._tasks)
