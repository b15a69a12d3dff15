import json

import pytest

from volume_forge.loaders.spec_loader import (
    load_spec_file,
    normalize_specs,
    parse_spec_token,
    read_spec_file,
)
from volume_forge.models.specs import FileSpec


def test_parse_plain_and_sized_tokens():
    assert parse_spec_token("logs/app.log") == FileSpec(path="logs/app.log")
    assert parse_spec_token("data/big.bin:250") == FileSpec(path="data/big.bin", size_mb=250.0)
    assert parse_spec_token("half.bin:0.5") == FileSpec(path="half.bin", size_mb=0.5)


def test_parse_token_with_non_numeric_suffix_keeps_whole_path():
    assert parse_spec_token("weird:name.txt") == FileSpec(path="weird:name.txt")
    assert parse_spec_token(":12") == FileSpec(path=":12")


def test_normalize_mixed_entries():
    specs, warnings = normalize_specs(
        [
            "a.txt",
            {"path": "b.txt", "size_mb": 3},
            {"path": "c.txt", "sizeMB": "4"},
            FileSpec(path="d.txt", size_mb=1),
        ]
    )

    assert specs == [
        FileSpec(path="a.txt"),
        FileSpec(path="b.txt", size_mb=3.0),
        FileSpec(path="c.txt", size_mb=4.0),
        FileSpec(path="d.txt", size_mb=1.0),
    ]
    assert warnings == []


def test_normalize_demotes_bad_sizes():
    specs, warnings = normalize_specs(
        [
            {"path": "zero", "size_mb": 0},
            {"path": "neg", "size_mb": -2},
            {"path": "text", "size_mb": "lots"},
            {"path": "flag", "size_mb": True},
            FileSpec(path="nan", size_mb=float("nan")),
        ]
    )

    assert [s.path for s in specs] == ["zero", "neg", "text", "flag", "nan"]
    assert all(s.size_mb is None for s in specs)
    assert len(warnings) == 5


def test_normalize_drops_entries_without_path():
    specs, warnings = normalize_specs(["", "   ", {"size_mb": 3}, 42, None, "ok"])

    assert specs == [FileSpec(path="ok")]
    assert len(warnings) == 5


def test_load_spec_file(tmp_path):
    spec_file = tmp_path / "specs.json"
    spec_file.write_text(json.dumps(["a", {"path": "b", "size_mb": 2}, {"nope": 1}]), encoding="utf-8")

    specs, warnings = load_spec_file(str(spec_file))

    assert specs == [FileSpec(path="a"), FileSpec(path="b", size_mb=2.0)]
    assert len(warnings) == 1


def test_read_spec_file_requires_array(tmp_path):
    spec_file = tmp_path / "specs.json"
    spec_file.write_text(json.dumps({"path": "a"}), encoding="utf-8")

    with pytest.raises(ValueError):
        read_spec_file(str(spec_file))


def test_read_spec_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_spec_file(str(tmp_path / "absent.json"))
