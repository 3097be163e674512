# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Options controlling how documents are written."""

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from nmlkit.values.formatting import FormatOptions

# ###############
# Public Interface
# ###############


class WriteOptions(BaseModel):
    """Layout options for writing a namelist document.

    Field aliases use kebab-case so that options can be read from YAML
    config files; Python callers may use either spelling.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    force: bool = False
    column_width: int = _Field(default=72, alias="column-width", gt=0)
    indent: str = "    "
    end_comma: bool = _Field(default=False, alias="end-comma")
    uppercase: bool = False
    float_precision: int | None = _Field(default=None, alias="float-precision", ge=0)
    sort_groups: bool = _Field(default=False, alias="sort-groups")
    sort_variables: bool = _Field(default=False, alias="sort-variables")
    default_start_index: int = _Field(default=1, alias="default-start-index")

    def format_options(self) -> FormatOptions:
        """Value formatting options implied by these write options."""
        return FormatOptions(uppercase=self.uppercase, float_precision=self.float_precision)
