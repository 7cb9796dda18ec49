from __future__ import annotations

import json
import sys
from typing import Any

from .base import Reporter, TaskRecord, format_summary, get_verbosity


class JsonLinesReporter(Reporter):
    """Machine-readable JSON lines reporter (one event per line on stdout)."""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, event: str, **payload: Any) -> None:
        payload["event"] = event
        self.stream.write(json.dumps(payload, sort_keys=True, default=str) + "\n")

    def _on_start(self, rec: TaskRecord) -> None:
        self._emit(
            "task_start",
            id=rec.task_id,
            name=rec.name,
            total=rec.total,
            **rec.meta,
        )

    def _on_advance(self, rec: TaskRecord, item: Any) -> None:
        self._emit(
            "task_progress",
            id=rec.task_id,
            completed=rec.completed,
            current_item=item,
        )

    def _on_end(self, rec: TaskRecord) -> None:
        self._emit(
            "task_end",
            **rec.meta,
            id=rec.task_id,
            status=rec.status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
        )

    def summary(self, kind: str, **fields: Any) -> None:
        # Structured fields travel as-is next to the rendered line.
        self._emit(
            "summary",
            **fields,
            summary_type=kind,
            raw=format_summary(kind, fields),
        )

    def status(self, message: str, **fields: Any) -> None:
        self._emit("status", **fields, message=message, level="info")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self._emit(
            "status",
            **fields,
            message=message,
            level=f"verbose{level}",
            vlevel=level,
        )

    def error(self, message: str, **fields: Any) -> None:
        self._emit("status", **fields, message=message, level="error")

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("status", **fields, message=message, level="warning")

    def section(self, title: str) -> None:
        self._emit("section", title=title)
