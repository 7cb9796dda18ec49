import json
from pathlib import Path

import pytest

from bfast.api import (
    PackOptions,
    UnpackOptions,
    build_bundle,
    inspect_file,
    pack_files,
    plan_sizes,
    unpack_to_directory,
    validate_file,
)
from bfast.models import NamedBuffer
from bfast.utils.io import write_bfast_file


def test_plan_sizes_dry_run():
    plan, plan_dict = plan_sizes([6, 12, 24])
    assert plan.data_end == 320
    assert plan.needed_size == 280
    pad = plan_dict["padding"]
    assert pad["total"] == sum(pad["by_section"].values())
    assert pad["by_section"]["preamble"] == 48
    assert pad["by_section"]["buffer[2]"] == 40
    assert plan_dict["statistics"]["data_bytes"] == 42
    json.dumps(plan_dict)


def test_build_bundle_rejects_invalid_spec(tmp_path: Path):
    spec_path = tmp_path / "bad.json"
    spec_path.write_text(json.dumps({"buffers": [{"data": "x"}]}))
    with pytest.raises(ValueError, match="E_FIELD"):
        build_bundle(PackOptions(spec_path, tmp_path / "out.bfast"))


def test_build_bundle_result(tmp_path: Path):
    spec_path = tmp_path / "ok.yaml"
    spec_path.write_text("buffers:\n  - name: a\n    data: abc\n")
    out = tmp_path / "out.bfast"
    result = build_bundle(PackOptions(spec_path, out))
    assert result.buffers == 1
    assert result.bytes_written == out.stat().st_size
    assert validate_file(out) == []


def test_unpack_empty_names_fall_back_to_index(tmp_path: Path):
    src = tmp_path / "in.bfast"
    write_bfast_file([NamedBuffer("", b"zz"), NamedBuffer("sub/x", b"y")], src)
    written = unpack_to_directory(UnpackOptions(src, tmp_path / "out"))
    root = (tmp_path / "out").resolve()
    assert [p.relative_to(root).as_posix() for p in written] == [
        "buffer_0000.bin",
        "sub/x",
    ]


def test_unpack_refuses_escaping_names(tmp_path: Path):
    src = tmp_path / "in.bfast"
    write_bfast_file([NamedBuffer("../evil", b"x")], src)
    with pytest.raises(ValueError):
        unpack_to_directory(UnpackOptions(src, tmp_path / "out"))
    assert not (tmp_path / "evil").exists()


def test_unpack_requires_force_to_overwrite(tmp_path: Path):
    src = tmp_path / "in.bfast"
    write_bfast_file([NamedBuffer("a", b"1")], src)
    out = tmp_path / "out"
    unpack_to_directory(UnpackOptions(src, out))
    with pytest.raises(FileExistsError):
        unpack_to_directory(UnpackOptions(src, out))
    unpack_to_directory(UnpackOptions(src, out, force=True))


def test_pack_files_and_inspect(tmp_path: Path):
    f = tmp_path / "data.bin"
    f.write_bytes(b"\x05" * 100)
    out = tmp_path / "o.bfast"
    result = pack_files([f], out)
    info = inspect_file(out)
    assert result.bytes_written == info["file_size"]
    assert info["buffers"][0] == {
        "index": 0,
        "name": "data.bin",
        "offset": 128,
        "size": 100,
    }


def test_unpack_keeps_every_duplicate_name(tmp_path: Path):
    src = tmp_path / "in.bfast"
    write_bfast_file(
        [
            NamedBuffer("a", b"1"),
            NamedBuffer("a", b"22"),
            NamedBuffer("m.bin", b"x"),
            NamedBuffer("m.bin", b"yy"),
        ],
        src,
    )
    out = tmp_path / "out"
    for force in (False, True):
        written = unpack_to_directory(UnpackOptions(src, out, force=force))
        root = out.resolve()
        assert [p.relative_to(root).as_posix() for p in written] == [
            "a",
            "a_0001",
            "m.bin",
            "m_0003.bin",
        ]
        assert [p.read_bytes() for p in written] == [b"1", b"22", b"x", b"yy"]
        assert len(set(written)) == 4
