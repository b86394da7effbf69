"""Event system: bus and event types for merge runs."""

from spritely.events.bus import EventBus
from spritely.events.types import (
    ImageSkipped,
    RunCompleted,
    RunStarted,
    SheetWritten,
    StylesheetWritten,
    TaskCompleted,
    TaskStarted,
    UnitFailed,
)

__all__ = [
    "EventBus",
    "ImageSkipped",
    "RunCompleted",
    "RunStarted",
    "SheetWritten",
    "StylesheetWritten",
    "TaskCompleted",
    "TaskStarted",
    "UnitFailed",
]
