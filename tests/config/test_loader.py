# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for loading and saving write-options config files."""

import pytest

from nmlkit.config.loader import CONFIG_FILE_NAME, find_write_options, load_write_options, save_write_options
from nmlkit.errors import ConfigError
from nmlkit.namelist.options import WriteOptions

# ###############
# Public Interface
# ###############


def test_config_file_name_constant():
    """CONFIG_FILE_NAME has the expected value."""
    assert CONFIG_FILE_NAME == ".nmlkit.yaml"


def test_load_empty_config(tmp_path):
    """An empty YAML file yields the default options."""
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text("", encoding="utf-8")

    assert load_write_options(path) == WriteOptions()


def test_load_kebab_case_keys(tmp_path):
    """Options are read from their kebab-case keys."""
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text(
        "column-width: 100\nend-comma: true\nuppercase: true\nfloat-precision: 3\nsort-groups: true\n",
        encoding="utf-8",
    )

    options = load_write_options(path)

    assert options.column_width == 100
    assert options.end_comma is True
    assert options.uppercase is True
    assert options.float_precision == 3
    assert options.sort_groups is True
    assert options.sort_variables is False


def test_save_and_load_round_trip(tmp_path):
    """Saved options load back unchanged."""
    path = tmp_path / CONFIG_FILE_NAME
    options = WriteOptions(force=True, column_width=60, indent="  ", default_start_index=0)

    save_write_options(options, path)

    assert load_write_options(path) == options


def test_saved_file_uses_sorted_kebab_case_keys(tmp_path):
    """The saved YAML uses the alias spelling in sorted order."""
    path = tmp_path / CONFIG_FILE_NAME
    save_write_options(WriteOptions(), path)

    keys = [line.split(":")[0] for line in path.read_text(encoding="utf-8").splitlines()]

    assert "column-width" in keys
    assert "column_width" not in keys
    assert keys == sorted(keys)


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("column-width: [unclosed\n", "Invalid YAML"),
        ("- column-width\n- 80\n", "must contain a YAML mapping"),
        ("colour: red\n", "Invalid config file"),
        ("column-width: 0\n", "Invalid config file"),
        ("float-precision: many\n", "Invalid config file"),
    ],
)
def test_invalid_config_raises(tmp_path, content, message):
    """Malformed YAML, non-mappings and schema violations raise ConfigError."""
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_write_options(path)


def test_missing_file_raises(tmp_path):
    """A missing config file raises ConfigError."""
    with pytest.raises(ConfigError, match="Cannot read config file"):
        load_write_options(tmp_path / "absent.yaml")


def test_config_error_is_not_recoverable(tmp_path):
    """ConfigError is reported in the config category."""
    with pytest.raises(ConfigError) as exc_info:
        load_write_options(tmp_path / "absent.yaml")
    assert exc_info.value.category == "config"
    assert not exc_info.value.recoverable


# ###############
# Config Discovery
# ###############


def test_find_config_in_parent_directory(tmp_path):
    """The nearest config file above the start directory is used."""
    (tmp_path / CONFIG_FILE_NAME).write_text("column-width: 40\n", encoding="utf-8")
    nested = tmp_path / "runs" / "case1"
    nested.mkdir(parents=True)

    assert find_write_options(nested).column_width == 40


def test_nearest_config_wins(tmp_path):
    """A config file closer to the start directory takes precedence."""
    (tmp_path / CONFIG_FILE_NAME).write_text("column-width: 40\n", encoding="utf-8")
    nested = tmp_path / "runs"
    nested.mkdir()
    (nested / CONFIG_FILE_NAME).write_text("column-width: 50\n", encoding="utf-8")

    assert find_write_options(nested).column_width == 50


def test_find_without_config_returns_defaults(tmp_path, monkeypatch):
    """Without any config file the default options are returned."""
    monkeypatch.setattr("nmlkit.config.loader._find_config_file", lambda start_dir: None)

    assert find_write_options(tmp_path) == WriteOptions()
