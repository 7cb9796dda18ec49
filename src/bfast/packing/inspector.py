"""BFAST decoding, validation and inspection.

Public functions:
- read_container(data) -> BfastContainer
- unpack(data) -> list[NamedBuffer]
- inspect_bfast(data) -> dict
- validate_bfast(data) -> list[str]

Every check fails fast: the first violation raises and nothing after it is
read. Decoded buffers are read-only views into ``data`` unless ``copy`` is
requested.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..logging import get_logger
from ..models import BfastContainer, Buffer, Header, NamedBuffer, Range
from .constants import ALIGNMENT, HEADER_SIZE
from .errors import (
    AlignmentError,
    NameCountMismatch,
    RangeError,
    SizeError,
    ValidationError,
    E_ALIGNMENT,
    E_DATA_END,
    E_DATA_START,
    E_NAME_COUNT,
    E_NUM_ARRAYS,
    E_RANGE_BOUNDS,
    E_RANGE_OVERLAP,
)
from .layout import is_aligned
from .names import unpack_names, zip_names
from .packers import parse_header, parse_ranges

__all__ = [
    "validate_header",
    "validate_ranges",
    "read_container",
    "unpack",
    "inspect_bfast",
    "validate_bfast",
]


def validate_header(header: Header, length: int) -> None:
    """Check header fields against each other and the stream length."""
    if header.data_start < HEADER_SIZE or header.data_start > length:
        raise SizeError(
            E_DATA_START,
            f"Data start {header.data_start} is not in the valid range of "
            f"{HEADER_SIZE} to {length}",
            {"data_start": header.data_start, "length": length},
        )
    if not is_aligned(header.data_start):
        raise AlignmentError(
            E_ALIGNMENT,
            f"Data start {header.data_start} is not aligned to {ALIGNMENT}",
            {"data_start": header.data_start, "alignment": ALIGNMENT},
        )
    if header.data_end < header.data_start:
        raise RangeError(
            E_DATA_END,
            f"Data end {header.data_end} is before data start {header.data_start}",
            {"data_start": header.data_start, "data_end": header.data_end},
        )
    if header.data_end > length:
        raise SizeError(
            E_DATA_END,
            f"Data end {header.data_end} is beyond data length {length}",
            {"data_end": header.data_end, "length": length},
        )
    if header.ranges_end > header.data_start:
        raise SizeError(
            E_NUM_ARRAYS,
            f"Range table for {header.num_arrays} arrays ends at "
            f"{header.ranges_end}, past data start {header.data_start}",
            {
                "num_arrays": header.num_arrays,
                "ranges_end": header.ranges_end,
                "data_start": header.data_start,
            },
        )
    if header.num_arrays == 0:
        raise NameCountMismatch(
            E_NAME_COUNT,
            "Stream has no name buffer",
            {"num_arrays": 0},
        )


def validate_ranges(header: Header, ranges: Sequence[Range]) -> None:
    lo = header.data_start
    hi = header.data_end
    for i, r in enumerate(ranges):
        if r.begin < lo or r.begin > hi:
            raise RangeError(
                E_RANGE_BOUNDS,
                f"Array {i} begin {r.begin} is not in valid span of {lo} to {hi}",
                {"index": i, "begin": r.begin, "min": lo, "max": hi},
            )
        if i > 0 and r.begin < ranges[i - 1].end:
            raise RangeError(
                E_RANGE_OVERLAP,
                f"Array {i} begin {r.begin} overlaps previous array ending "
                f"at {ranges[i - 1].end}",
                {"index": i, "begin": r.begin, "previous_end": ranges[i - 1].end},
            )
        if r.end < r.begin or r.end > hi:
            raise RangeError(
                E_RANGE_BOUNDS,
                f"Array {i} end {r.end} is not in valid span of {r.begin} to {hi}",
                {"index": i, "begin": r.begin, "end": r.end, "max": hi},
            )


def read_container(data: Buffer, *, copy: bool = False) -> BfastContainer:
    logger = get_logger()
    view = memoryview(data).toreadonly().cast("B")
    header, byteorder = parse_header(view)
    validate_header(header, len(view))
    ranges = parse_ranges(view, header, byteorder)
    validate_ranges(header, ranges)
    buffers: List[Buffer]
    if copy:
        buffers = [bytes(view[r.begin : r.end]) for r in ranges]
    else:
        buffers = [view[r.begin : r.end] for r in ranges]
    names = unpack_names(buffers[0])
    if len(names) != len(buffers) - 1:
        raise NameCountMismatch(
            E_NAME_COUNT,
            f"Found {len(names)} names for {len(buffers) - 1} buffers",
            {"names": len(names), "buffers": len(buffers) - 1},
        )
    logger.debug(
        "decoded %d arrays (byteorder=%s data_start=%d data_end=%d)",
        header.num_arrays,
        byteorder,
        header.data_start,
        header.data_end,
    )
    return BfastContainer(
        header=header,
        ranges=tuple(ranges),
        buffers=tuple(buffers),
        names=tuple(names),
    )


def unpack(data: Buffer, *, copy: bool = False) -> List[NamedBuffer]:
    """Decode a BFAST stream into its named buffers, in stored order."""
    container = read_container(data, copy=copy)
    return zip_names(container.names, container.data_buffers)


def inspect_bfast(data: Buffer) -> Dict[str, Any]:
    container = read_container(data)
    header = container.header
    ranges = container.ranges
    length = len(memoryview(data).cast("B"))
    occupied = sum(r.size for r in ranges)
    return {
        "file_size": length,
        "header": {
            "magic": f"0x{header.magic:016x}",
            "same_endian": header.same_endian,
            "data_start": header.data_start,
            "data_end": header.data_end,
            "num_arrays": header.num_arrays,
        },
        "ranges": [
            {"index": i, "begin": r.begin, "end": r.end, "size": r.size}
            for i, r in enumerate(ranges)
        ],
        "buffers": [
            {
                "index": i,
                "name": nb.name,
                "offset": ranges[i + 1].begin,
                "size": nb.size,
            }
            for i, nb in enumerate(container.named_buffers())
        ],
        "names_size": ranges[0].size,
        "padding": header.data_end - header.ranges_end - occupied,
        "trailing": length - header.data_end,
    }


def validate_bfast(data: Buffer) -> List[str]:
    """Diagnostic wrapper: ``[]`` when valid, else the first violation."""
    try:
        read_container(data)
    except ValidationError as e:
        return [str(e)]
    return []
