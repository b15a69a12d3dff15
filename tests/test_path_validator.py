from volume_forge.models.specs import FileSpec
from volume_forge.validators.path_validator import PathValidator


def test_relative_paths_are_kept(tmp_path):
    specs = [FileSpec(path="a.txt"), FileSpec(path="dir/sub/b.bin", size_mb=1), FileSpec(path="x/../y.txt")]

    valid, report = PathValidator(tmp_path).validate(specs)

    assert valid == specs
    assert report.warnings == []


def test_traversal_and_absolute_paths_are_dropped(tmp_path):
    specs = [
        FileSpec(path="../outside.txt"),
        FileSpec(path="a/../../escape.txt"),
        FileSpec(path=str(tmp_path / "abs.txt")),
        FileSpec(path="."),
        FileSpec(path="inside.txt"),
    ]

    valid, report = PathValidator(tmp_path).validate(specs)

    assert [s.path for s in valid] == ["inside.txt"]
    assert len(report.rejected) == 4
    assert len(report.warnings) == 4


def test_duplicates_are_kept_with_warning(tmp_path):
    specs = [FileSpec(path="dup.txt"), FileSpec(path="./dup.txt", size_mb=2)]

    valid, report = PathValidator(tmp_path).validate(specs)

    assert len(valid) == 2
    assert len(report.warnings) == 1
    assert report.rejected == []
