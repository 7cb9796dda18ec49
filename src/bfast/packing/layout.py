"""Low-level layout helpers (alignment, buffer offsets)."""

from __future__ import annotations
from typing import List, Sequence

from ..models import Range
from .constants import ALIGNMENT, HEADER_SIZE, RANGE_SIZE
from .errors import (
    AlignmentError,
    BfastError,
    E_ALIGNMENT,
    E_SIZE_NEGATIVE,
)

__all__ = [
    "align",
    "is_aligned",
    "compute_padding",
    "compute_data_start",
    "compute_offsets",
    "compute_needed_size",
    "compute_data_end",
]


def is_aligned(n: int, alignment: int = ALIGNMENT) -> bool:
    return n % alignment == 0


def align(n: int, alignment: int = ALIGNMENT) -> int:
    """Round ``n`` up to the next multiple of ``alignment``."""
    return (n + alignment - 1) & ~(alignment - 1)


def compute_padding(n: int, alignment: int = ALIGNMENT) -> int:
    return align(n, alignment) - n


def compute_data_start(num_arrays: int) -> int:
    return align(HEADER_SIZE + RANGE_SIZE * num_arrays)


def compute_offsets(sizes: Sequence[int]) -> List[Range]:
    """Place each buffer at the next aligned position after its predecessor.

    Empty buffers occupy no space: the following buffer starts at the same
    position.
    """
    pos = compute_data_start(len(sizes))
    ranges: List[Range] = []
    for i, size in enumerate(sizes):
        if size < 0:
            raise BfastError(
                E_SIZE_NEGATIVE,
                f"Buffer {i} has negative size {size}",
                {"index": i, "size": size},
            )
        if not is_aligned(pos):
            raise AlignmentError(
                E_ALIGNMENT,
                f"Buffer {i} would start at unaligned offset {pos}",
                {"index": i, "offset": pos, "alignment": ALIGNMENT},
            )
        ranges.append(Range(pos, pos + size))
        pos = align(pos + size)
    return ranges


def compute_needed_size(sizes: Sequence[int]) -> int:
    """Bytes needed up to the end of the last buffer (no trailing padding)."""
    offsets = compute_offsets(sizes)
    if not offsets:
        return compute_data_start(0)
    return offsets[-1].end


def compute_data_end(sizes: Sequence[int]) -> int:
    """Total stream length: the needed size padded to alignment."""
    return align(compute_needed_size(sizes))
