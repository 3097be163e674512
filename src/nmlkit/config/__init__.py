# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Write options stored in YAML config files."""

from nmlkit.config.loader import CONFIG_FILE_NAME, find_write_options, load_write_options, save_write_options

__all__ = ["CONFIG_FILE_NAME", "find_write_options", "load_write_options", "save_write_options"]
