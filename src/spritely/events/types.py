"""Event types emitted during a merge run."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RunStarted:
    sources: int


@dataclass(frozen=True)
class RunCompleted:
    elapsed_ms: int
    sheets: int
    stylesheets: int


@dataclass(frozen=True)
class TaskStarted:
    name: str


@dataclass(frozen=True)
class TaskCompleted:
    name: str


@dataclass(frozen=True)
class ImageSkipped:
    path: str
    reason: str


@dataclass(frozen=True)
class SheetWritten:
    path: str
    images: int


@dataclass(frozen=True)
class StylesheetWritten:
    path: str


@dataclass(frozen=True)
class UnitFailed:
    path: str
    error: str
