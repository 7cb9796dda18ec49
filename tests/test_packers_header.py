import struct

import pytest

from bfast.models import Header, Range
from bfast.packing.constants import (
    HEADER_SIZE,
    MAGIC,
    RANGE_SIZE,
    SWAPPED_MAGIC,
)
from bfast.packing.errors import FormatError, SizeError
from bfast.packing.packers import (
    detect_byteorder,
    make_header,
    pack_header,
    pack_preamble,
    pack_ranges,
    parse_header,
    parse_ranges,
)


def test_header_size_and_layout():
    header = Header(MAGIC, 128, 320, 3)
    raw = pack_header(header)
    assert len(raw) == HEADER_SIZE
    assert struct.unpack("<4Q", raw) == (MAGIC, 128, 320, 3)


def test_ranges_size_and_layout():
    ranges = [Range(128, 134), Range(192, 204)]
    raw = pack_ranges(ranges)
    assert len(raw) == 2 * RANGE_SIZE
    assert struct.unpack("<4Q", raw) == (128, 134, 192, 204)


def test_preamble_zero_padded_to_data_start():
    ranges = [Range(128, 134), Range(192, 204), Range(256, 280)]
    header = make_header(ranges, 320)
    assert header == Header(MAGIC, 128, 320, 3)
    raw = pack_preamble(header, ranges)
    assert len(raw) == 128
    assert raw[HEADER_SIZE + 3 * RANGE_SIZE :] == b"\x00" * 48


def test_parse_header_native():
    raw = pack_header(Header(MAGIC, 64, 128, 2)) + b"\x00" * 96
    header, order = parse_header(raw)
    assert order == "<"
    assert header.same_endian
    assert (header.data_start, header.data_end, header.num_arrays) == (
        64,
        128,
        2,
    )


def test_parse_header_swapped():
    raw = pack_header(Header(MAGIC, 64, 128, 2), byteorder=">")
    assert struct.unpack_from("<Q", raw)[0] == SWAPPED_MAGIC
    header, order = parse_header(raw + b"\x00" * 96)
    assert order == ">"
    assert not header.same_endian
    assert header.magic == SWAPPED_MAGIC
    assert header.num_arrays == 2


def test_parse_ranges_swapped():
    ranges = [Range(64, 70), Range(128, 128)]
    header = Header(MAGIC, 64, 128, 2)
    raw = pack_preamble(header, ranges, byteorder=">") + b"\x00" * 64
    assert parse_ranges(raw, header, ">") == ranges


def test_bad_magic_rejected():
    raw = struct.pack("<4Q", 0x1234, 64, 64, 1) + b"\x00" * 32
    with pytest.raises(FormatError) as ei:
        detect_byteorder(raw)
    assert ei.value.code == "E_MAGIC"


def test_truncated_header_rejected():
    with pytest.raises(SizeError) as ei:
        parse_header(b"\xa5\xbf" + b"\x00" * 20)
    assert ei.value.code == "E_TRUNCATED"


def test_truncated_range_table_rejected():
    header = Header(MAGIC, 64, 64, 4)
    raw = pack_header(header) + b"\x00" * 16
    with pytest.raises(SizeError):
        parse_ranges(raw, header)
