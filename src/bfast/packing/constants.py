"""Format constants for BFAST version 1.

Layout (all words are unsigned 64-bit, little-endian as written):

    [00-07]  magic
    [08-15]  data_start
    [16-23]  data_end
    [24-31]  num_arrays
    [32-..]  num_arrays x (begin, end) ranges
    align(32 + 16 * num_arrays) .. data_end: buffers, each 64-byte aligned
"""

from __future__ import annotations

import struct

__all__ = [
    "MAGIC",
    "SWAPPED_MAGIC",
    "ALIGNMENT",
    "HEADER_SIZE",
    "RANGE_SIZE",
    "RANGES_OFFSET",
    "HEADER_FORMAT",
    "RANGE_FORMAT",
    "NAME_SEPARATOR",
    "FORMAT_VERSION",
    "BYTE_ORDER_SAME",
    "BYTE_ORDER_SWAPPED",
]

FORMAT_VERSION = 1

MAGIC = 0xBFA5
# MAGIC as read by a reader whose endianness differs from the writer's
SWAPPED_MAGIC = 0xA5BF << 48

# Fits objects natively into 256-bit registers; fixed per format version.
ALIGNMENT = 64

HEADER_FORMAT = "QQQQ"  # magic, data_start, data_end, num_arrays
RANGE_FORMAT = "QQ"  # begin, end

HEADER_SIZE = 32
RANGE_SIZE = 16
RANGES_OFFSET = HEADER_SIZE

NAME_SEPARATOR = b"\x00"

BYTE_ORDER_SAME = "<"
BYTE_ORDER_SWAPPED = ">"

assert struct.calcsize("<" + HEADER_FORMAT) == HEADER_SIZE
assert struct.calcsize("<" + RANGE_FORMAT) == RANGE_SIZE
assert ALIGNMENT & (ALIGNMENT - 1) == 0
