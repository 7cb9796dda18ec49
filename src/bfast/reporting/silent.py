from __future__ import annotations

from .base import Reporter


class SilentReporter(Reporter):
    """No-op reporter; the default for library use and ``--reporter silent``."""

    def status(self, message: str, **fields):
        pass

    def error(self, message: str, **fields):
        pass

    def summary(self, kind: str, **fields):
        pass
