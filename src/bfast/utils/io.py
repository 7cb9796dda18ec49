"""IO helpers: bundle spec data extraction and BFAST file read/write."""

from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, List

from ..models import NamedBuffer
from ..packing.inspector import unpack
from ..packing.writer import write_stream
from .paths import safe_file_path

__all__ = [
    "DataError",
    "DATA_SOURCE_KEYS",
    "safe_read_file",
    "read_data_from_spec",
    "read_bfast_file",
    "write_bfast_file",
]

DEFAULT_MAX_SIZE = 1 << 32
MAX_HEX_STRING_LENGTH = 1 << 24
DATA_SOURCE_KEYS = ("data_hex", "file", "path", "data")


class DataError(RuntimeError):
    pass


def safe_read_file(path: Path, max_size: int = DEFAULT_MAX_SIZE) -> bytes:
    if not path.exists():
        raise DataError(f"File not found: {path}")
    size = path.stat().st_size
    if size > max_size:
        raise DataError(f"File too large: {size}>{max_size}")
    return path.read_bytes()


def read_data_from_spec(
    entry: dict[str, Any], base_dir: Path, max_size: int = DEFAULT_MAX_SIZE
) -> bytes:
    # - 'file' / 'path': file relative to the spec's directory
    # - 'data': inline text (UTF-8)
    # - 'data_hex': inline hex, whitespace ignored
    # A null source is a placeholder; no source at all is an empty buffer.
    sources = [
        k for k in DATA_SOURCE_KEYS if k in entry and entry.get(k) is not None
    ]
    if not sources:
        return b""
    if len(sources) > 1:
        raise DataError(f"Multiple data sources: {sources}")
    src = sources[0]
    if src == "data_hex":
        raw = entry["data_hex"]
        if not isinstance(raw, str):
            raise DataError("data_hex must be string")
        h = "".join(raw.split())
        if len(h) > MAX_HEX_STRING_LENGTH:
            raise DataError("hex string too long")
        if len(h) % 2:
            raise DataError("hex string must have even length")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise DataError(f"invalid hex: {e}") from e
    if src in ("file", "path"):
        p = entry[src]
        if not isinstance(p, str):
            raise DataError(f"{src} path must be string")
        try:
            resolved = safe_file_path(base_dir, p)
        except ValueError as e:
            raise DataError(f"{src} escapes spec directory: {p}") from e
        return safe_read_file(resolved, max_size)
    d = entry["data"]
    if isinstance(d, str):
        return d.encode("utf-8")
    if isinstance(d, bytes):
        return d
    raise DataError("data must be str or bytes")


def read_bfast_file(
    path: str | Path, *, copy: bool = True, max_size: int = DEFAULT_MAX_SIZE
) -> List[NamedBuffer]:
    """Read and decode a BFAST file.

    With ``copy=False`` the buffers are read-only views into the file contents.
    """
    return unpack(safe_read_file(Path(path), max_size), copy=copy)


def write_bfast_file(
    named_buffers: Iterable[NamedBuffer], path: str | Path
) -> int:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("wb") as f:
        return write_stream(named_buffers, f)
