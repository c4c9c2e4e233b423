from pathlib import Path

import pytest

from videoscript.core.errors import InvalidPackageError, PackageNotFoundError, ValidationError
from videoscript.utils import file_tools, validators


def test_validate_package_path(tmp_path):
    with pytest.raises(PackageNotFoundError):
        validators.validate_package_path(tmp_path / "missing.zip")
    other = tmp_path / "notes.txt"
    other.write_text("x")
    with pytest.raises(InvalidPackageError):
        validators.validate_package_path(other)
    archive = tmp_path / "export.ZIP"
    archive.write_bytes(b"")
    assert validators.validate_package_path(archive) == archive
    assert validators.is_archive(archive)
    assert not validators.is_archive(Path("project.json"))


def test_parse_frame_list():
    assert validators.parse_frame_list(None) is None
    assert validators.parse_frame_list(" ") is None
    assert validators.parse_frame_list("30, 0,2-4,30") == [0, 2, 3, 4, 30]
    with pytest.raises(ValidationError):
        validators.parse_frame_list("5-2")
    with pytest.raises(ValidationError):
        validators.parse_frame_list("abc")
    with pytest.raises(ValidationError):
        validators.parse_frame_list("-3")


def test_selection_and_range_checks():
    validators.validate_frame_selection([1], None, None)
    with pytest.raises(ValidationError):
        validators.validate_frame_selection([1], 4, None)
    validators.validate_frame_range(0, 10)
    with pytest.raises(ValidationError):
        validators.validate_frame_range(10, 10)


def test_validate_max_size():
    assert validators.validate_max_size(None) is None
    assert validators.validate_max_size(2) == 2 * 1024 * 1024
    with pytest.raises(ValidationError):
        validators.validate_max_size(0)


def test_format_output_filename():
    assert file_tools.format_output_filename("Demo Short!", None, timestamp=7) == "Demo_Short__7.json"
    assert file_tools.format_output_filename("Demo", "{name}-plan.json") == "Demo-plan.json"
    assert file_tools.safe_stem("") == "project"


def test_validate_positive_int():
    assert validators.validate_positive_int(None, "Step") is None
    assert validators.validate_positive_int(3, "Step") == 3
    with pytest.raises(ValidationError):
        validators.validate_positive_int(0, "Step")
    with pytest.raises(ValidationError):
        validators.validate_positive_int(-1, "Sample count")
