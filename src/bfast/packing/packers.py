"""Pure binary packing functions for the BFAST header and range table.

All functions are side-effect free and work on byte slices with explicit
fixed-width formats; nothing depends on host struct layout.
"""

from __future__ import annotations

import struct
from typing import List, Sequence, Tuple

from ..models import Header, Range
from .constants import (
    BYTE_ORDER_SAME,
    BYTE_ORDER_SWAPPED,
    HEADER_FORMAT,
    HEADER_SIZE,
    MAGIC,
    RANGE_FORMAT,
    RANGE_SIZE,
    RANGES_OFFSET,
    SWAPPED_MAGIC,
)
from .errors import (
    FormatError,
    SizeError,
    internal_error,
    E_MAGIC,
    E_TRUNCATED,
)

__all__ = [
    "make_header",
    "pack_header",
    "pack_ranges",
    "pack_preamble",
    "detect_byteorder",
    "parse_header",
    "parse_ranges",
]


def make_header(ranges: Sequence[Range], data_end: int) -> Header:
    if not ranges:
        return Header(MAGIC, 0, 0, 0)
    return Header(
        magic=MAGIC,
        data_start=ranges[0].begin,
        data_end=data_end,
        num_arrays=len(ranges),
    )


def pack_header(header: Header, *, byteorder: str = BYTE_ORDER_SAME) -> bytes:
    return struct.pack(
        byteorder + HEADER_FORMAT,
        header.magic,
        header.data_start,
        header.data_end,
        header.num_arrays,
    )


def pack_ranges(
    ranges: Sequence[Range], *, byteorder: str = BYTE_ORDER_SAME
) -> bytes:
    fmt = struct.Struct(byteorder + RANGE_FORMAT)
    return b"".join(fmt.pack(r.begin, r.end) for r in ranges)


def pack_preamble(
    header: Header,
    ranges: Sequence[Range],
    *,
    byteorder: str = BYTE_ORDER_SAME,
) -> bytes:
    """Header + range table + zero padding up to ``header.data_start``."""
    if len(ranges) != header.num_arrays:
        raise internal_error(
            "Range count does not match header",
            {"ranges": len(ranges), "num_arrays": header.num_arrays},
        )
    out = pack_header(header, byteorder=byteorder) + pack_ranges(
        ranges, byteorder=byteorder
    )
    if header.data_start > len(out):
        out += b"\x00" * (header.data_start - len(out))
    return out


def detect_byteorder(data: bytes | memoryview) -> str:
    if len(data) < 8:
        raise SizeError(
            E_TRUNCATED,
            f"Data length {len(data)} too short for magic",
            {"length": len(data)},
        )
    (magic,) = struct.unpack_from("<Q", data, 0)
    if magic == MAGIC:
        return BYTE_ORDER_SAME
    if magic == SWAPPED_MAGIC:
        return BYTE_ORDER_SWAPPED
    raise FormatError(
        E_MAGIC,
        f"Invalid magic number 0x{magic:016x}",
        {"magic": magic},
    )


def parse_header(data: bytes | memoryview) -> Tuple[Header, str]:
    """Return the header (fields in native order) and the stream byte order.

    The magic is kept as read little-endian so ``Header.same_endian`` reports
    whether the writer's endianness matched.
    """
    if len(data) < HEADER_SIZE:
        raise SizeError(
            E_TRUNCATED,
            f"Data length {len(data)} is smaller than header size {HEADER_SIZE}",
            {"length": len(data), "header_size": HEADER_SIZE},
        )
    byteorder = detect_byteorder(data)
    (raw_magic,) = struct.unpack_from("<Q", data, 0)
    _, data_start, data_end, num_arrays = struct.unpack_from(
        byteorder + HEADER_FORMAT, data, 0
    )
    return Header(raw_magic, data_start, data_end, num_arrays), byteorder


def parse_ranges(
    data: bytes | memoryview,
    header: Header,
    byteorder: str = BYTE_ORDER_SAME,
) -> List[Range]:
    end = RANGES_OFFSET + RANGE_SIZE * header.num_arrays
    if end > len(data):
        raise SizeError(
            E_TRUNCATED,
            f"Range table ends at {end} beyond data length {len(data)}",
            {"ranges_end": end, "length": len(data)},
        )
    fmt = struct.Struct(byteorder + RANGE_FORMAT)
    return [
        Range(*fmt.unpack_from(data, RANGES_OFFSET + RANGE_SIZE * i))
        for i in range(header.num_arrays)
    ]
