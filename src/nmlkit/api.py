# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""File-level entry points: read, write and patch namelist files.

Every function reads its whole input into memory before scanning and writes
its output in one pass; no file handle outlives the call.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TextIO

from nmlkit.errors import FileAlreadyExistsError, NamelistIOError
from nmlkit.namelist.document import Namelist
from nmlkit.namelist.options import WriteOptions
from nmlkit.parser.streaming import StreamingParser

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def read(path: Path | str) -> Namelist:
    """Parse the namelist file at ``path``.

    Raises:
        NamelistIOError: If the file cannot be read.
        LexerError: On unterminated strings or invalid exponents.
        ParseError: On malformed groups or assignments.
    """
    logger.debug("Reading namelist at: %s", path)
    return reads(_read_text(Path(path)))


def reads(text: str) -> Namelist:
    """Parse namelist text."""
    return StreamingParser(text).parse()


def write(namelist: Namelist, path: Path | str, options: WriteOptions | None = None) -> None:
    """Write ``namelist`` to ``path`` in canonical formatting.

    Raises:
        FileAlreadyExistsError: If ``path`` exists and ``options.force`` is not set.
        NamelistIOError: If the file cannot be written.
    """
    opts = options or WriteOptions()
    target = Path(path)
    if target.exists() and not opts.force:
        raise FileAlreadyExistsError(target)
    logger.debug("Writing namelist to: %s", target)
    _write_text(target, writes(namelist, opts))


def writes(namelist: Namelist, options: WriteOptions | None = None) -> str:
    """Return the canonical text of ``namelist``."""
    return namelist.to_fortran_string(options)


def write_to_writer(namelist: Namelist, writer: TextIO, options: WriteOptions | None = None) -> None:
    """Write the canonical text of ``namelist`` to an open text stream."""
    writer.write(writes(namelist, options))


def patch(original: Namelist, patch: Namelist, strict: bool = False) -> Namelist:
    """Return a copy of ``original`` with ``patch`` applied; ``original`` is unchanged.

    Raises:
        IncompatiblePatchError: If ``strict`` and a patch value cannot replace
            the existing value's type.
    """
    result = original.copy()
    result.apply_patch(patch, strict=strict)
    return result


def patch_file(input_path: Path | str, patch: Namelist, output_path: Path | str) -> Namelist:
    """Rewrite ``input_path`` into ``output_path`` with the values of ``patch`` substituted.

    Formatting and comments of the input are preserved. The output file is
    only written once the whole input has been processed.

    Returns:
        The patched document.

    Raises:
        NamelistIOError: If either file cannot be read or written.
    """
    logger.debug("Patching %s into %s", input_path, output_path)
    buffer = io.StringIO()
    result = patch_to_writer(_read_text(Path(input_path)), patch, buffer)
    _write_text(Path(output_path), buffer.getvalue())
    return result


def patch_to_writer(text: str, patch: Namelist, writer: TextIO) -> Namelist:
    """Write ``text`` to ``writer`` with the values of ``patch`` substituted."""
    return StreamingParser(text).parse_and_patch(writer, patch)


def patches(text: str, patch: Namelist) -> str:
    """Return ``text`` with the values of ``patch`` substituted."""
    buffer = io.StringIO()
    patch_to_writer(text, patch, buffer)
    return buffer.getvalue()


def patch_with_template(
    input_path: Path | str,
    patch: Namelist,
    output_path: Path | str | None = None,
) -> Namelist:
    """Apply ``patch`` using the file at ``input_path`` as a formatting template.

    With an ``output_path`` the patched text is written there; without one
    only the resulting document is computed.
    """
    if output_path is not None:
        return patch_file(input_path, patch, output_path)
    return patch_to_writer(_read_text(Path(input_path)), patch, io.StringIO())


# ################
# Implementation
# ################


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise NamelistIOError(f"Cannot read namelist file '{path}': {exc}") from exc


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise NamelistIOError(f"Cannot write namelist file '{path}': {exc}") from exc
