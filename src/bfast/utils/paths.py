"""Path utilities (safe resolution)."""

from __future__ import annotations
from pathlib import Path, PurePosixPath

__all__ = ["safe_file_path", "buffer_file_name", "indexed_file_name"]


def safe_file_path(base_dir: Path, file_path: str) -> Path:
    base_dir = base_dir.resolve()
    resolved = (base_dir / file_path).resolve()
    resolved.relative_to(base_dir)  # raises ValueError if escapes
    return resolved


def buffer_file_name(index: int, name: str) -> str:
    """File name for an unpacked buffer; empty names fall back to the index."""
    return name if name else f"buffer_{index:04d}.bin"


def indexed_file_name(index: int, rel: str) -> str:
    """Insert the buffer index before the suffix: ``a.bin`` -> ``a_0003.bin``."""
    p = PurePosixPath(rel)
    return str(p.with_name(f"{p.stem}_{index:04d}{p.suffix}"))
