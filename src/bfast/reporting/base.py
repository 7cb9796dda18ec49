from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "format_summary",
    "task",
]

# Keys surfaced in task completion lines, in display order.
TASK_STAT_KEYS = ("buffers", "bytes", "planned", "padding")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()


STATUS_ICONS = {TaskStatus.SUCCESS: "✔", TaskStatus.FAILED: "✖"}


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0

    def progress_part(self) -> str:
        return f" {self.completed}/{self.total}" if self.total is not None else ""

    def stats_part(self) -> str:
        stats = [
            f"{key}={self.meta[key]}" for key in TASK_STAT_KEYS if key in self.meta
        ]
        return f" [{' '.join(stats)}]" if stats else ""

    def completion_line(self) -> str:
        icon = STATUS_ICONS.get(self.status, "?")
        return (
            f"{icon} {self.name}{self.progress_part()}"
            f" ({self.duration:.2f}s){self.stats_part()}"
        )


_VERBOSITY: int = 0  # global verbosity level set by CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


def format_summary(kind: str, fields: Dict[str, Any]) -> str:
    """Render ``"<Kind> summary: k=v ..."``, the line shape every backend uses."""
    kv = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{kind.title()} summary: {kv}".rstrip()


class Reporter:
    """Tracks task records; backends render the ``_on_*`` events.

    Tasks come from :func:`task` (encode, read, write phases of the API);
    messages come from the CLI and the ``bfast`` logger.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, TaskRecord] = {}

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        rec = TaskRecord(task_id, name, total, meta=meta)
        self._tasks[task_id] = rec
        self._on_start(rec)

    def advance(self, task_id: str, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if rec is None:
            return
        rec.completed += 1
        rec.meta.update(meta)
        self._on_advance(rec, meta.get("current_item"))

    def end_task(
        self, task_id: str, status: TaskStatus = TaskStatus.SUCCESS
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if rec is None:
            return
        rec.status = status
        rec.end_time = time.time()
        self._on_end(rec)

    def _on_start(self, rec: TaskRecord) -> None:
        pass

    def _on_advance(self, rec: TaskRecord, item: Any) -> None:
        pass

    def _on_end(self, rec: TaskRecord) -> None:
        pass

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        pass

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def summary(self, kind: str, **fields: Any) -> None:
        self.status(format_summary(kind, fields))

    def section(self, title: str) -> None:
        pass

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    """Active reporter; library use stays quiet until the CLI installs one."""
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .silent import SilentReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = SilentReporter()
    return _ACTIVE_REPORTER


@contextmanager
def task(task_id: str, name: str, total: int | None = None, **meta: Any):
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    try:
        yield rep
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED)
        raise
    else:
        rep.end_task(task_id, TaskStatus.SUCCESS)
