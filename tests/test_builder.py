import io

from bfast.models import NamedBuffer
from bfast.packing.builder import BfastBuilder
from bfast.packing.inspector import unpack
from bfast.packing.writer import pack


def test_builder_matches_pack():
    b = BfastBuilder().add("xs", b"\x01" * 12).add("ys", b"\x02" * 24)
    expected = pack(
        [NamedBuffer("xs", b"\x01" * 12), NamedBuffer("ys", b"\x02" * 24)]
    )
    assert b.to_bytes() == expected
    assert b.size() == len(expected) == 320
    assert len(b) == 2
    assert b.names == ["xs", "ys"]


def test_builder_text_children_are_utf8():
    b = BfastBuilder().add("greeting", "héllo")
    (nb,) = unpack(b.to_bytes())
    assert nb.tobytes() == "héllo".encode("utf-8")


def test_builder_recomputes_after_add():
    b = BfastBuilder().add("a", b"1")
    first = b.size()
    b.add("b", b"2" * 100)
    assert b.size() > first
    assert [n.name for n in unpack(b.to_bytes())] == ["a", "b"]
    assert b.plan().num_arrays == 3


def test_nested_builder_embeds_complete_stream():
    inner = BfastBuilder().add("leaf", b"leafdata")
    outer = BfastBuilder().add("meta", b"m").add("child", inner)
    assert outer.child_sizes() == [1, inner.size()]
    outer_items = unpack(outer.to_bytes())
    assert [n.name for n in outer_items] == ["meta", "child"]
    nested = unpack(outer_items[1].tobytes())
    assert [(n.name, n.tobytes()) for n in nested] == [("leaf", b"leafdata")]


def test_nested_builder_changes_are_seen_by_parent():
    inner = BfastBuilder()
    outer = BfastBuilder().add("child", inner)
    before = outer.size()
    inner.add("big", b"x" * 500)
    assert outer.size() > before


def test_builder_write_matches_to_bytes():
    b = BfastBuilder().add_all(
        [NamedBuffer("a", b"abc"), NamedBuffer("b", b"")]
    )
    f = io.BytesIO()
    assert b.write(f) == b.size()
    assert f.getvalue() == b.to_bytes()


def test_freeze_snapshots_children():
    b = BfastBuilder().add("a", bytearray(b"abc"))
    frozen = b.freeze()
    assert frozen == (NamedBuffer("a", b"abc"),)
