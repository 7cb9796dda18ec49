"""Name buffer codec: NUL-terminated UTF-8 names stored in buffer 0."""

from __future__ import annotations
from typing import Iterable, List, Sequence

from ..models import Buffer, NamedBuffer
from .constants import NAME_SEPARATOR
from .errors import (
    BfastError,
    FormatError,
    NameCountMismatch,
    E_NAME_COUNT,
    E_NAME_ENCODING,
    E_NAME_NUL,
)

__all__ = ["pack_names", "unpack_names", "zip_names"]


def pack_names(names: Iterable[str]) -> bytes:
    out = bytearray()
    for i, name in enumerate(names):
        encoded = name.encode("utf-8")
        if NAME_SEPARATOR in encoded:
            raise BfastError(
                E_NAME_NUL,
                f"Buffer name at index {i} contains a NUL byte",
                {"index": i, "name": name},
            )
        out += encoded
        out += NAME_SEPARATOR
    return bytes(out)


def unpack_names(buffer: Buffer) -> List[str]:
    raw = bytes(buffer)
    if not raw:
        return []
    parts = raw.split(NAME_SEPARATOR)
    if raw.endswith(NAME_SEPARATOR):
        parts.pop()
    names: List[str] = []
    for i, part in enumerate(parts):
        try:
            names.append(part.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise FormatError(
                E_NAME_ENCODING,
                f"Name {i} is not valid UTF-8",
                {"index": i, "position": e.start},
            ) from e
    return names


def zip_names(
    names: Sequence[str], buffers: Sequence[Buffer]
) -> List[NamedBuffer]:
    if len(names) != len(buffers):
        raise NameCountMismatch(
            E_NAME_COUNT,
            f"Found {len(names)} names for {len(buffers)} buffers",
            {"names": len(names), "buffers": len(buffers)},
        )
    return [NamedBuffer(n, b) for n, b in zip(names, buffers)]
