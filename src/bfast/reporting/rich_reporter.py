from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Reporter, TaskRecord, get_verbosity

TRANSIENT_ENV = "BFAST_PROGRESS_TRANSIENT"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").lower() in ("1", "true", "yes")


class RichReporter(Reporter):
    def __init__(self, console: Console | None = None):
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        super().__init__()
        self._transient = _env_flag(TRANSIENT_ENV)
        self.progress: Progress | None = None
        self._task_ids: Dict[str, TaskID] = {}
        self._completions: List[str] = []

    def _ensure_progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}", justify="left"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def _on_start(self, rec: TaskRecord) -> None:
        # Tasks without a known total render as rules, not progress bars.
        if rec.total is None:
            self.console.rule(rec.name)
            return
        progress = self._ensure_progress()
        self._task_ids[rec.task_id] = progress.add_task(rec.name, total=rec.total)

    def _on_advance(self, rec: TaskRecord, item: Any) -> None:
        rid = self._task_ids.get(rec.task_id)
        if rid is None or self.progress is None:
            return
        description = f"{rec.name} ↳ {item}" if item else rec.name
        self.progress.update(rid, completed=rec.completed, description=description)

    def _on_end(self, rec: TaskRecord) -> None:
        rid = self._task_ids.pop(rec.task_id, None)
        if rid is not None and self.progress is not None:
            self.progress.update(
                rid, completed=rec.total or rec.completed, description=rec.name
            )
        line = rec.completion_line()
        if self._transient:
            self._completions.append(line)
        else:
            self.console.print(line, markup=False)
        if not self._task_ids:
            self.flush()

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {escape(message)}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {escape(message)}")

    def section(self, title: str) -> None:
        self.console.rule(title)

    def flush(self) -> None:
        if self.progress is not None:
            try:
                self.progress.stop()
            finally:
                self.progress = None
                self._task_ids.clear()
        if self._completions:
            self.console.print("\n".join(self._completions), markup=False)
            self._completions.clear()
