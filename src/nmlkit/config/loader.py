# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML files holding write options."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from nmlkit.errors import ConfigError
from nmlkit.namelist.options import WriteOptions

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".nmlkit.yaml"


def load_write_options(path: Path) -> WriteOptions:
    """Load and validate write options from a YAML file.

    Keys use the kebab-case spelling (``column-width``, ``end-comma``, ...).
    An empty file yields the default options.

    Args:
        path: Path to the YAML file.

    Returns:
        A validated WriteOptions instance.

    Raises:
        ConfigError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a YAML mapping")

    try:
        options = WriteOptions.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file '{path}': {exc}") from exc
    logger.debug("Loaded write options from: %s", path)
    return options


def save_write_options(options: WriteOptions, path: Path) -> None:
    """Save write options to a YAML file, keys sorted for reproducible output.

    Raises:
        ConfigError: If the file cannot be written.
    """
    data = options.model_dump(by_alias=True)
    try:
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=True), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot write config file '{path}': {exc}") from exc


def find_write_options(start_dir: Path) -> WriteOptions:
    """Load the nearest config file at or above ``start_dir``.

    Returns the default options when no directory up to the filesystem root
    holds a ``.nmlkit.yaml`` file.

    Raises:
        ConfigError: If the file found is invalid.
    """
    path = _find_config_file(start_dir)
    if path is None:
        logger.debug("No %s found above %s, using defaults", CONFIG_FILE_NAME, start_dir)
        return WriteOptions()
    return load_write_options(path)


# ################
# Implementation
# ################


def _find_config_file(start_dir: Path) -> Path | None:
    current = start_dir.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None
