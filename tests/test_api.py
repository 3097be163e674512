# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the file-level read, write and patch functions."""

import io

import pytest

import nmlkit
from nmlkit import FileAlreadyExistsError, Namelist, NamelistIOError, WriteOptions
from nmlkit.values.value import IntegerValue

# ###############
# Test Helpers
# ###############

_SOURCE = "! run settings\n&run\n  steps = 10  ! keep short\n  dt = 0.5\n/\n"


def _document() -> Namelist:
    namelist = Namelist()
    namelist.insert_group("run").insert("steps", 10).insert("dt", 0.5)
    return namelist


def _patch(steps: int) -> Namelist:
    namelist = Namelist()
    namelist.insert_group("run").insert("steps", steps)
    return namelist


# ###############
# Reading and Writing
# ###############


def test_write_then_read(tmp_path):
    """A written file reads back to an equal document."""
    path = tmp_path / "input.nml"
    nmlkit.write(_document(), path)

    assert path.read_text(encoding="utf-8") == "&run\n    steps = 10\n    dt = 0.5\n/\n"
    assert nmlkit.read(path) == _document()


def test_read_accepts_string_path(tmp_path):
    """Paths may be given as strings."""
    path = tmp_path / "input.nml"
    path.write_text(_SOURCE, encoding="utf-8")

    namelist = nmlkit.read(str(path))

    assert namelist["run"]["steps"] == IntegerValue(10)
    assert namelist["run"].get_comment("steps") == "! keep short"


def test_write_refuses_to_overwrite(tmp_path):
    """Writing over an existing file needs force."""
    path = tmp_path / "input.nml"
    path.write_text("old", encoding="utf-8")

    with pytest.raises(FileAlreadyExistsError):
        nmlkit.write(_document(), path)
    assert path.read_text(encoding="utf-8") == "old"

    nmlkit.write(_document(), path, WriteOptions(force=True))
    assert nmlkit.read(path) == _document()


def test_read_missing_file(tmp_path):
    """A missing input file raises NamelistIOError."""
    with pytest.raises(NamelistIOError, match="Cannot read"):
        nmlkit.read(tmp_path / "absent.nml")


def test_write_into_missing_directory(tmp_path):
    """An unwritable destination raises NamelistIOError."""
    with pytest.raises(NamelistIOError, match="Cannot write"):
        nmlkit.write(_document(), tmp_path / "absent" / "out.nml")


def test_writes_and_write_to_writer_agree():
    """The string and stream writers produce the same text."""
    options = WriteOptions(uppercase=True)
    stream = io.StringIO()
    nmlkit.write_to_writer(_document(), stream, options)

    assert stream.getvalue() == nmlkit.writes(_document(), options)
    assert stream.getvalue().startswith("&RUN\n    STEPS = 10\n")


def test_reads_parses_text():
    """reads parses namelist text directly."""
    assert nmlkit.reads(_SOURCE)["run"]["dt"].as_real() == 0.5


# ###############
# Patching
# ###############


def test_patch_leaves_original_unchanged():
    """patch returns a new document and does not touch its inputs."""
    original = _document()

    patched = nmlkit.patch(original, _patch(99))

    assert patched["run"]["steps"] == IntegerValue(99)
    assert original["run"]["steps"] == IntegerValue(10)


def test_patches_preserves_comments():
    """Text patching only replaces the patched value."""
    output = nmlkit.patches(_SOURCE, _patch(99))

    assert output == _SOURCE.replace("steps = 10", "steps = 99")


def test_patch_file(tmp_path):
    """patch_file writes the patched text and returns the patched document."""
    source = tmp_path / "input.nml"
    target = tmp_path / "output.nml"
    source.write_text(_SOURCE, encoding="utf-8")

    result = nmlkit.patch_file(source, _patch(99), target)

    assert target.read_text(encoding="utf-8") == _SOURCE.replace("steps = 10", "steps = 99")
    assert source.read_text(encoding="utf-8") == _SOURCE
    assert result["run"]["steps"] == IntegerValue(99)
    assert result["run"]["dt"].as_real() == 0.5


def test_patch_file_missing_input_writes_nothing(tmp_path):
    """A failed read leaves no output file behind."""
    target = tmp_path / "output.nml"

    with pytest.raises(NamelistIOError):
        nmlkit.patch_file(tmp_path / "absent.nml", _patch(1), target)
    assert not target.exists()


def test_patch_with_template_without_output(tmp_path):
    """Without an output path only the document is computed."""
    source = tmp_path / "input.nml"
    source.write_text(_SOURCE, encoding="utf-8")

    result = nmlkit.patch_with_template(source, _patch(7))

    assert result["run"]["steps"] == IntegerValue(7)
    assert sorted(path.name for path in tmp_path.iterdir()) == ["input.nml"]


def test_patch_with_template_with_output(tmp_path):
    """With an output path the patched text is written."""
    source = tmp_path / "input.nml"
    target = tmp_path / "output.nml"
    source.write_text(_SOURCE, encoding="utf-8")

    nmlkit.patch_with_template(source, _patch(7), target)

    assert "steps = 7  ! keep short" in target.read_text(encoding="utf-8")


def test_patch_to_writer_returns_document():
    """patch_to_writer streams the text and returns the merged document."""
    stream = io.StringIO()

    result = nmlkit.patch_to_writer(_SOURCE, _patch(3), stream)

    assert "steps = 3" in stream.getvalue()
    assert result.group_names() == ["run"]
