import json
from pathlib import Path

import pytest

from bfast.spec.loader import load_spec, parse_spec_dict
from bfast.spec.validator import run_validation_pipeline


def _codes(errors):
    return {e.code for e in errors}


def test_load_json_spec(tmp_path: Path):
    p = tmp_path / "bundle.json"
    p.write_text(
        json.dumps({"version": 1, "buffers": [{"name": "a", "data": "x"}]}),
        encoding="utf-8",
    )
    spec = load_spec(p)
    assert spec.version == 1
    assert spec.buffers == [{"name": "a", "data": "x"}]


def test_load_yaml_spec(tmp_path: Path):
    p = tmp_path / "bundle.yaml"
    p.write_text(
        "buffers:\n  - name: a\n    data_hex: 'de ad'\n  - name: b\n    file: b.bin\n",
        encoding="utf-8",
    )
    spec = load_spec(p)
    assert spec.version == 1
    assert [e["name"] for e in spec.buffers] == ["a", "b"]


def test_load_rejects_non_object_root(tmp_path: Path):
    p = tmp_path / "bad.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_spec(p)


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_spec(tmp_path / "missing.json")


def test_parse_rejects_non_list_buffers():
    with pytest.raises(ValueError):
        parse_spec_dict({"buffers": {"name": "a"}})


def test_validation_ok():
    spec = {"buffers": [{"name": "a", "data": "x"}, {"name": "", "file": "f"}]}
    assert run_validation_pipeline(spec) == []


def test_validation_entry_type_and_name():
    errs = run_validation_pipeline({"buffers": ["nope", {"data": "x"}]})
    assert _codes(errs) == {"E_TYPE", "E_FIELD"}
    assert {e.path for e in errs} == {"buffers[0]", "buffers[1].name"}


def test_validation_buffers_not_list():
    errs = run_validation_pipeline({"buffers": 3})
    assert _codes(errs) == {"E_TYPE"}


def test_validation_semantic_errors():
    spec = {
        "buffers": [
            {"name": "a\x00b"},
            {"name": "c", "data": "x", "data_hex": "00"},
        ]
    }
    errs = run_validation_pipeline(spec)
    assert _codes(errs) == {"E_NAME_NUL", "E_SOURCE"}
    assert errs[0].to_dict()["path"] == "buffers[0].name"
