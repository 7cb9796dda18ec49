from __future__ import annotations

import sys
from typing import Any

from .base import Reporter, TaskRecord, get_verbosity

_LEVEL_COLORS = {"INFO": "32", "WARN": "33", "ERROR": "31", "VERB": "36"}


class PlainReporter(Reporter):
    """Line-oriented reporter for terminals and logs; colour only on a TTY."""

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _line(self, label: str, message: str, suffix: str = "") -> None:
        tag = f"{label}{suffix}"
        if self.use_color:
            tag = f"\x1b[{_LEVEL_COLORS[label]}m{tag}\x1b[0m"
        self.stream.write(f"{tag}: {message}\n")

    def _on_advance(self, rec: TaskRecord, item: Any) -> None:
        # Per-buffer lines only at -v; bundles can hold many buffers.
        if get_verbosity() < 1:
            return
        total = rec.total if rec.total is not None else "?"
        label = item or f"#{rec.completed}"
        self.stream.write(f"   · {rec.name}: {label} ({rec.completed}/{total})\n")

    def _on_end(self, rec: TaskRecord) -> None:
        self.stream.write(f" {rec.completion_line()}\n")

    def status(self, message: str, **fields: Any) -> None:
        self._line("INFO", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._line("VERB", message, str(level))

    def error(self, message: str, **fields: Any) -> None:
        self._line("ERROR", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._line("WARN", message)

    def section(self, title: str) -> None:
        self.stream.write(f"\n[{title}]\n")

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()
