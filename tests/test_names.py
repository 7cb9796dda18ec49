import pytest

from bfast.packing.errors import BfastError, FormatError, NameCountMismatch
from bfast.packing.names import pack_names, unpack_names, zip_names


def test_pack_names_terminates_each_name():
    assert pack_names(["a", "", "héllo"]) == b"a\x00\x00h\xc3\xa9llo\x00"
    assert pack_names([]) == b""


def test_unpack_names_keeps_empty_names():
    assert unpack_names(b"a\x00\x00b\x00") == ["a", "", "b"]
    assert unpack_names(b"") == []
    assert unpack_names(b"\x00") == [""]


def test_unpack_names_keeps_unterminated_tail():
    assert unpack_names(b"a\x00tail") == ["a", "tail"]


def test_unpack_names_accepts_views():
    raw = b"xs\x00ys\x00"
    assert unpack_names(memoryview(raw)) == ["xs", "ys"]


def test_nul_in_name_rejected():
    with pytest.raises(BfastError) as ei:
        pack_names(["ok", "bad\x00name"])
    assert ei.value.code == "E_NAME_NUL"
    assert ei.value.context["index"] == 1


def test_invalid_utf8_rejected():
    with pytest.raises(FormatError) as ei:
        unpack_names(b"ok\x00\xff\xfe\x00")
    assert ei.value.code == "E_NAME_ENCODING"
    assert ei.value.context["index"] == 1


def test_zip_names_count_mismatch():
    with pytest.raises(NameCountMismatch):
        zip_names(["a"], [b"1", b"2"])
    named = zip_names(["a", "b"], [b"1", b"2"])
    assert [(n.name, n.data) for n in named] == [("a", b"1"), ("b", b"2")]
