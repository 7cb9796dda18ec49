"""Value types shared by the BFAST encoder and decoder."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from .packing.constants import (
    HEADER_SIZE,
    MAGIC,
    RANGE_SIZE,
)

__all__ = [
    "Buffer",
    "byte_view",
    "Header",
    "Range",
    "NamedBuffer",
    "BfastContainer",
]

# Anything exposing a length and contiguous byte access.
Buffer = Union[bytes, bytearray, memoryview]


def byte_view(data: Buffer) -> memoryview:
    """Flat byte view of ``data``; ``len()`` then counts bytes, not items."""
    return memoryview(data).cast("B")


@dataclass(frozen=True, slots=True)
class Header:
    magic: int
    data_start: int
    data_end: int
    num_arrays: int

    @property
    def ranges_end(self) -> int:
        return HEADER_SIZE + RANGE_SIZE * self.num_arrays

    @property
    def same_endian(self) -> bool:
        return self.magic == MAGIC


@dataclass(frozen=True, slots=True)
class Range:
    begin: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.begin


@dataclass(frozen=True, slots=True)
class NamedBuffer:
    name: str
    data: Buffer

    @property
    def size(self) -> int:
        return memoryview(self.data).nbytes

    def tobytes(self) -> bytes:
        return bytes(self.data)


@dataclass(frozen=True, slots=True)
class BfastContainer:
    """A decoded stream: header, range table and buffer views.

    ``buffers[0]`` is the reserved name buffer; ``names`` lines up with
    ``buffers[1:]``. Indexing and ``len()`` address the data buffers only.
    """

    header: Header
    ranges: Tuple[Range, ...]
    buffers: Tuple[Buffer, ...]
    names: Tuple[str, ...]

    @property
    def same_endian(self) -> bool:
        return self.header.same_endian

    @property
    def name_buffer(self) -> Buffer:
        return self.buffers[0]

    @property
    def data_buffers(self) -> Tuple[Buffer, ...]:
        return self.buffers[1:]

    def named_buffers(self) -> list[NamedBuffer]:
        return [
            NamedBuffer(name, data)
            for name, data in zip(self.names, self.data_buffers)
        ]

    def __len__(self) -> int:
        return len(self.buffers) - 1

    def __getitem__(self, index: int) -> NamedBuffer:
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError(index)
        return NamedBuffer(self.names[index], self.buffers[index + 1])

    def __iter__(self) -> Iterator[NamedBuffer]:
        return iter(self.named_buffers())
