# Copyright 2026 nmlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural parsing and format-preserving patching of namelist text.

Two algorithms share one value interpreter:

* :meth:`StreamingParser.parse` walks the whitespace-free token list and
  builds a :class:`Namelist`.
* :meth:`StreamingParser.parse_and_patch` walks the complete token list once,
  copying every token to the output except the values that the patch
  replaces. Patch variables that never appear in a group are written just
  before its close; patch groups that never appear are written after the
  document.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple, TextIO

from nmlkit.errors import InvalidIndexError, InvalidValueError, MissingTemplateInfoError, ParseError, UnexpectedEofError
from nmlkit.indexing.findex import DEFAULT_ORIGIN, IndexBound, parse_index_spec
from nmlkit.namelist.document import Namelist
from nmlkit.namelist.group import Group, format_assignment
from nmlkit.namelist.options import WriteOptions
from nmlkit.scanner.lexer import DEFAULT_COMMENT_CHARS
from nmlkit.scanner.scanner import scan, scan_with_whitespace
from nmlkit.scanner.token import Token, TokenType
from nmlkit.values.parsing import parse_character, parse_complex, parse_integer, parse_value
from nmlkit.values.value import (
    ArrayValue,
    BaseValue,
    DerivedTypeArrayValue,
    DerivedTypeValue,
    MultiArrayValue,
    NullValue,
    Value,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class StreamingParser:
    """Parser over one namelist text.

    Args:
        source: The complete namelist text.
        comment_chars: Characters that start a comment.
    """

    def __init__(self, source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> None:
        self._source: str | None = source
        self._comment_chars = comment_chars
        self._tokens: list[Token] | None = None

    @classmethod
    def from_tokens(cls, tokens: Sequence[Token]) -> StreamingParser:
        """Build a parser from an existing token list.

        Such a parser can only run :meth:`parse`; without the source text
        there is no layout to preserve.
        """
        parser = cls("")
        parser._source = None
        parser._tokens = [token for token in tokens if token.type != TokenType.WHITESPACE]
        return parser

    def parse(self) -> Namelist:
        """Parse the text into a document.

        Tokens before the first group are ignored.

        Raises:
            LexerError: On unterminated strings or invalid exponents.
            ParseError: On a malformed group or assignment.
            UnexpectedEofError: If the input ends inside a group.
        """
        tokens = self._tokens if self._tokens is not None else scan(self._source or "", self._comment_chars)
        return _StructuralParser(tokens).parse()

    def parse_and_patch(self, writer: TextIO, patch: Namelist) -> Namelist:
        """Write the text to ``writer`` with the values in ``patch`` substituted.

        Every token is copied unchanged except the value tokens of variables
        the patch defines. The returned document holds the original values
        for untouched variables and the patch values for the rest.

        Raises:
            MissingTemplateInfoError: If the parser was built without source text.
            LexerError: On unterminated strings or invalid exponents.
            ParseError: On a malformed group or assignment.
        """
        if self._source is None:
            raise MissingTemplateInfoError("parse_and_patch")
        tokens = scan_with_whitespace(self._source, self._comment_chars)
        return _PatchWriter(tokens, patch, writer).run()


def parse(source: str, comment_chars: str = DEFAULT_COMMENT_CHARS) -> Namelist:
    """Parse namelist text into a document."""
    return StreamingParser(source, comment_chars).parse()


def parse_and_patch(
    source: str,
    patch: Namelist,
    writer: TextIO,
    comment_chars: str = DEFAULT_COMMENT_CHARS,
) -> Namelist:
    """Write ``source`` to ``writer`` with the values of ``patch`` substituted."""
    return StreamingParser(source, comment_chars).parse_and_patch(writer, patch)


# ################
# Implementation
# ################

_ASSIGNMENT_FOLLOWERS = frozenset({TokenType.ASSIGN, TokenType.LPAREN, TokenType.PERCENT})


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return repr(token.value)


def _error(message: str, token: Token) -> ParseError:
    if token.type == TokenType.EOF:
        return UnexpectedEofError(message, token.line, token.column)
    return ParseError(message, token.line, token.column)


def _is_group_terminator(token: Token) -> bool:
    return token.type == TokenType.GROUP_END or token.is_group_open


class _Subscript(NamedTuple):
    """A parsed ``( ... )`` index expression.

    ``elements`` marks the dimensions written as a plain index, so that
    ``x(1)`` and ``x(1:1)`` can be told apart.
    """

    bounds: list[IndexBound]
    elements: list[bool]


def _parse_bounds(text: str, opening: Token) -> _Subscript:
    try:
        bounds = parse_index_spec(text)
    except InvalidIndexError as exc:
        raise ParseError(f"Invalid index expression '({text})'", opening.line, opening.column) from exc
    return _Subscript(bounds, [":" not in part for part in text.split(",")])


# ------------------------------------------------------------------
# Value interpretation shared by both modes
# ------------------------------------------------------------------


def _read_values(tokens: Sequence[Token]) -> list[Value]:
    """Interpret the significant tokens of one value list.

    Values may be separated by commas or by nothing at all. Consecutive
    commas produce nulls, a trailing comma does not. ``n*v`` repeats ``v``
    and ``n*`` repeats a null.
    """
    items: list[Value] = []
    expect_value = True
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.type == TokenType.COMMA:
            if expect_value:
                items.append(NullValue())
            expect_value = True
            i += 1
            continue
        if token.type == TokenType.INTEGER and i + 1 < len(tokens) and tokens[i + 1].type == TokenType.STAR:
            count = parse_integer(token.value).value
            if count <= 0:
                raise InvalidValueError(token.value, "repeat count greater than zero")
            i += 2
            if i < len(tokens) and tokens[i].type != TokenType.COMMA:
                value, i = _read_scalar(tokens, i)
            else:
                value = NullValue()
            items.extend(value.copy_value() for _ in range(count))
            expect_value = False
            continue
        value, i = _read_scalar(tokens, i)
        items.append(value)
        expect_value = False
    return items


def _read_scalar(tokens: Sequence[Token], i: int) -> tuple[Value, int]:
    token = tokens[i]
    if token.type == TokenType.STRING:
        return parse_character(token.value), i + 1
    if token.type == TokenType.LPAREN:
        return _read_complex(tokens, i)
    if token.type in (TokenType.INTEGER, TokenType.REAL, TokenType.LOGICAL, TokenType.IDENTIFIER):
        return parse_value(token.value), i + 1
    if token.type == TokenType.INVALID:
        raise ParseError(f"Invalid character {token.value!r}", token.line, token.column)
    raise _error(f"Unexpected {_describe(token)} in value", token)


def _read_complex(tokens: Sequence[Token], i: int) -> tuple[Value, int]:
    """Read ``( re , im )`` starting at the opening parenthesis."""
    opening = tokens[i]
    parts: list[str] = []
    j = i + 1
    while j < len(tokens) and tokens[j].type != TokenType.RPAREN:
        parts.append(tokens[j].value)
        j += 1
    if j >= len(tokens):
        raise ParseError("Unterminated complex literal", opening.line, opening.column)
    text = "(" + "".join(parts) + ")"
    try:
        return parse_complex(text), j + 1
    except InvalidValueError as exc:
        raise ParseError(f"Invalid complex literal {text!r}", opening.line, opening.column) from exc


def _items_of(value: Value) -> list[Value]:
    """The value list that the text of ``value`` reads back as."""
    if isinstance(value, (ArrayValue, MultiArrayValue)):
        return list(value.values)
    if isinstance(value, NullValue):
        return []
    return [value]


def _shape_value(items: list[Value], subscript: _Subscript | None) -> tuple[Value, list[int] | None]:
    """Turn a value list into a value, using the index expression only for shape.

    Returns the value and the start indices to record, if any.
    """
    if not items:
        return NullValue(), None
    if subscript is None:
        return (items[0] if len(items) == 1 else ArrayValue(items)), None

    bounds = subscript.bounds
    if len(bounds) == 1:
        origin = bounds[0].effective_start(DEFAULT_ORIGIN)
        start = [origin] if origin != DEFAULT_ORIGIN else None
        if subscript.elements[0] and len(items) == 1:
            return items[0], start
        return ArrayValue(items), start

    if all(subscript.elements):
        starts = [bound.effective_start(DEFAULT_ORIGIN) for bound in bounds]
        recorded = starts if any(s != DEFAULT_ORIGIN for s in starts) else None
        return (items[0] if len(items) == 1 else ArrayValue(items)), recorded

    sizes = [bound.size() if bound.start is not None and bound.effective_stride() == 1 else None for bound in bounds]
    if all(size is not None for size in sizes):
        dimensions = [size for size in sizes if size is not None]
        expected = 1
        for size in dimensions:
            expected *= size
        if expected == len(items):
            starts = [bound.effective_start(DEFAULT_ORIGIN) for bound in bounds]
            return MultiArrayValue(items, dimensions, starts), None
    return (items[0] if len(items) == 1 else ArrayValue(items)), None


def _assign(
    group: Group,
    base: str,
    subscript: _Subscript | None,
    path: list[str],
    value: Value,
    start: list[int] | None,
) -> None:
    """Store one parsed assignment in ``group``.

    A component path builds a derived type, or an element of a derived
    type array when the base name carries a single index.
    """
    if not path:
        group.insert(base, value)
        if start is not None:
            group.set_start_indices(base, start)
        return

    if subscript is None:
        existing = group.get(base)
        target = existing if isinstance(existing, DerivedTypeValue) else DerivedTypeValue()
        _assign_path(target.fields, path, value)
        group.insert(base, target)
        return

    bounds = subscript.bounds
    if len(bounds) != 1 or not subscript.elements[0] or bounds[0].start is None:
        raise InvalidIndexError(", ".join(str(b) for b in bounds), "derived type arrays take a single index", base)
    position = bounds[0].start - DEFAULT_ORIGIN
    if position < 0:
        raise InvalidIndexError(str(bounds[0]), f"index below {DEFAULT_ORIGIN}", base)
    existing = group.get(base)
    array = existing if isinstance(existing, DerivedTypeArrayValue) else DerivedTypeArrayValue()
    while len(array.elements) <= position:
        array.elements.append({})
    _assign_path(array.elements[position], path, value)
    group.insert(base, array)


def _assign_path(fields: dict[str, Value], path: list[str], value: Value) -> None:
    for name in path[:-1]:
        node = fields.get(name)
        if not isinstance(node, DerivedTypeValue):
            node = DerivedTypeValue()
            fields[name] = node
        fields = node.fields
    fields[path[-1]] = value


def _lookup_path(value: BaseValue, path: list[str]) -> Value | None:
    node: BaseValue | None = value
    for name in path:
        if not isinstance(node, DerivedTypeValue):
            return None
        node = node.fields.get(name)
    return node  # type: ignore[return-value]


def _flatten_fields(value: DerivedTypeValue, prefix: tuple[str, ...] = ()) -> list[tuple[tuple[str, ...], Value]]:
    """List ``(path, leaf)`` pairs of a derived type, nested types expanded."""
    leaves: list[tuple[tuple[str, ...], Value]] = []
    for name, field in value.fields.items():
        if isinstance(field, DerivedTypeValue):
            leaves.extend(_flatten_fields(field, (*prefix, name)))
        else:
            leaves.append(((*prefix, name), field))
    return leaves


# ------------------------------------------------------------------
# Structural mode
# ------------------------------------------------------------------


class _StructuralParser:
    """Recursive-descent parser over whitespace-free tokens."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens: list[Token] = []
        self._comments: dict[int, str] = {}
        for token in tokens:
            if token.type == TokenType.COMMENT:
                self._comments[token.line] = token.value
            elif token.type != TokenType.WHITESPACE:
                self._tokens.append(token)
        if not self._tokens or self._tokens[-1].type != TokenType.EOF:
            last = self._tokens[-1] if self._tokens else None
            line = last.line if last else 1
            self._tokens.append(Token(TokenType.EOF, "", line, 1))
        self._pos = 0

    def parse(self) -> Namelist:
        namelist = Namelist()
        while not self._check(TokenType.EOF):
            if self._current().is_group_open:
                self._parse_group(namelist)
            else:
                self._advance()
        return namelist

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _expect_name(self, what: str) -> Token:
        token = self._current()
        if not token.is_name():
            raise _error(f"Expected {what}, found {_describe(token)}", token)
        return self._advance()

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def _parse_group(self, namelist: Namelist) -> None:
        self._advance()  # & or $
        name = self._expect_name("group name").value
        group = namelist.insert_group(name)
        logger.debug("Parsing group %s", group.name)
        while True:
            token = self._current()
            if token.type == TokenType.EOF:
                raise _error(f"Unterminated group '{group.name}'", token)
            if token.type == TokenType.GROUP_END:
                self._advance()
                return
            if token.is_group_open:
                following = self._peek()
                if following.is_name() and following.value.lower() != "end":
                    return
                self._advance()
                if following.is_name():
                    self._advance()
                return
            if token.type == TokenType.COMMA:
                self._advance()
                continue
            if token.is_name():
                self._parse_assignment(group)
                continue
            if token.type == TokenType.INVALID:
                raise ParseError(f"Invalid character {token.value!r}", token.line, token.column)
            raise _error(f"Expected variable name, found {_describe(token)}", token)

    def _parse_assignment(self, group: Group) -> None:
        base = self._advance().value.lower()
        subscript = self._parse_index() if self._check(TokenType.LPAREN) else None
        path: list[str] = []
        field_subscript: _Subscript | None = None
        while self._check(TokenType.PERCENT):
            self._advance()
            path.append(self._expect_name("component name after '%'").value.lower())
            field_subscript = self._parse_index() if self._check(TokenType.LPAREN) else None

        assign = self._current()
        if assign.type != TokenType.ASSIGN:
            raise _error(f"Expected '=' after '{base}', found {_describe(assign)}", assign)
        self._advance()

        start = self._pos
        end = self._value_span_end(start)
        items = _read_values(self._tokens[start:end])
        self._pos = end

        if path:
            value, _ = _shape_value(items, field_subscript)
            _assign(group, base, subscript, path, value, None)
        else:
            value, start_indices = _shape_value(items, subscript)
            _assign(group, base, subscript, path, value, start_indices)

        last_line = self._tokens[end - 1].line if end > start else assign.line
        following = self._tokens[end]
        if following.line > last_line or not following.is_name():
            comment = self._comments.pop(last_line, None)
            if comment is not None:
                group.set_comment(base, comment)

    def _parse_index(self) -> _Subscript:
        """Consume ``( ... )`` and parse its contents as an index expression."""
        opening = self._advance()
        parts: list[str] = []
        while not self._check(TokenType.RPAREN):
            token = self._current()
            if token.type == TokenType.EOF:
                raise _error("Unterminated index expression", token)
            parts.append(token.value)
            self._advance()
        self._advance()  # )
        return _parse_bounds("".join(parts), opening)

    def _value_span_end(self, start: int) -> int:
        """Index of the first token after the value list starting at ``start``."""
        depth = 0
        i = start
        while True:
            token = self._tokens[i]
            if token.type == TokenType.EOF:
                return i
            if depth == 0:
                if _is_group_terminator(token):
                    return i
                if token.is_name() and self._tokens[i + 1].type in _ASSIGNMENT_FOLLOWERS:
                    return i
            if token.type == TokenType.LPAREN:
                depth += 1
            elif token.type == TokenType.RPAREN:
                depth = max(0, depth - 1)
            i += 1


# ------------------------------------------------------------------
# Parse-and-patch mode
# ------------------------------------------------------------------


class _PatchWriter:
    """Single forward pass over the complete token list, writing as it goes.

    The only state is the cursor, the current group's patch, and which of
    its variables (or derived-type fields) have already been written.
    """

    def __init__(self, tokens: list[Token], patch: Namelist, writer: TextIO) -> None:
        self._tokens = tokens
        self._patch = patch
        self._writer = writer
        self._pos = 0
        self._result = Namelist()
        self._seen_groups: set[str] = set()
        self._options = WriteOptions()
        self._newline = _detect_newline(tokens)

    def run(self) -> Namelist:
        while True:
            token = self._current()
            if token.type == TokenType.EOF:
                break
            if token.is_group_open:
                self._patch_group()
            else:
                self._take()
        self._append_unseen_groups()
        return self._result

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _take(self) -> Token:
        """Copy the current token to the output and advance."""
        token = self._tokens[self._pos]
        self._writer.write(token.value)
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _copy_trivia(self) -> None:
        """Copy whitespace and comments up to the next significant token."""
        while self._current().is_trivia:
            self._take()

    def _next_significant(self, i: int) -> Token:
        j = i + 1
        while self._tokens[j].is_trivia:
            j += 1
        return self._tokens[j]

    def _copy_index_span(self) -> _Subscript:
        """Copy ``( ... )`` verbatim and parse the significant text inside it."""
        opening = self._take()
        depth = 1
        parts: list[str] = []
        while True:
            token = self._current()
            if token.type == TokenType.EOF:
                raise _error("Unterminated index expression", token)
            if token.type == TokenType.LPAREN:
                depth += 1
            elif token.type == TokenType.RPAREN:
                depth -= 1
                if depth == 0:
                    self._take()
                    break
            if not token.is_trivia:
                parts.append(token.value)
            self._take()
        return _parse_bounds("".join(parts), opening)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def _patch_group(self) -> None:
        self._take()  # & or $
        self._copy_trivia()
        name_token = self._current()
        if not name_token.is_name():
            raise _error(f"Expected group name, found {_describe(name_token)}", name_token)
        self._take()
        name = name_token.value.lower()
        self._seen_groups.add(name)
        patch_group = self._patch.get_group(name)
        result_group = self._result.insert_group(name)
        logger.debug("Patching group %s (%s)", name, "has patch" if patch_group is not None else "copy only")

        emitted: set[str] = set()
        emitted_fields: dict[str, set[tuple[str, ...]]] = {}
        pending: list[Token] = []
        while True:
            token = self._current()
            if token.type == TokenType.EOF:
                raise _error(f"Unterminated group '{name}'", token)
            if token.type == TokenType.WHITESPACE:
                pending.append(token)
                self._pos += 1
                continue
            if _is_group_terminator(token):
                self._close_group(patch_group, result_group, emitted, emitted_fields, pending)
                following = self._tokens[self._pos + 1]
                if token.is_group_open and following.is_name() and following.value.lower() != "end":
                    return
                self._take()
                if token.is_group_open and following.is_name():
                    self._take()
                return
            for held in pending:
                self._writer.write(held.value)
            pending = []
            if token.is_name() and self._next_significant(self._pos).type in _ASSIGNMENT_FOLLOWERS:
                self._patch_assignment(patch_group, result_group, emitted, emitted_fields)
            else:
                self._take()

    def _close_group(
        self,
        patch_group: Group | None,
        result_group: Group,
        emitted: set[str],
        emitted_fields: dict[str, set[tuple[str, ...]]],
        pending: list[Token],
    ) -> None:
        """Write patch variables not seen in the group, then the held whitespace."""
        lines: list[str] = []
        if patch_group is not None:
            for name, value in patch_group.variables():
                done = emitted_fields.get(name, set())
                if isinstance(value, (DerivedTypeValue, DerivedTypeArrayValue)) or name not in emitted:
                    lines.extend(self._unseen_lines(patch_group, name, value, done))
                    _record_unseen(result_group, patch_group, name, value, done)
        held = "".join(token.value for token in pending)
        if not lines:
            self._writer.write(held)
            return
        logger.debug("Appending %d new line(s) to group %s", len(lines), result_group.name)
        for line in lines:
            self._writer.write(self._newline + line)
        self._writer.write(held if "\n" in held else self._newline)

    def _unseen_lines(self, patch_group: Group, name: str, value: Value, done: set[tuple[str, ...]]) -> list[str]:
        if isinstance(value, DerivedTypeValue):
            lines: list[str] = []
            for path, leaf in _flatten_fields(value):
                if path not in done:
                    lines.extend(format_assignment("%".join((name, *path)), leaf, self._options))
            return lines
        return format_assignment(
            name,
            value,
            self._options,
            start_indices=patch_group.get_start_indices(name),
            comment=patch_group.get_comment(name),
        )

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def _patch_assignment(
        self,
        patch_group: Group | None,
        result_group: Group,
        emitted: set[str],
        emitted_fields: dict[str, set[tuple[str, ...]]],
    ) -> None:
        base = self._take().value.lower()
        subscript: _Subscript | None = None
        self._copy_trivia()
        if self._current().type == TokenType.LPAREN:
            subscript = self._copy_index_span()
            self._copy_trivia()
        path: list[str] = []
        field_subscript: _Subscript | None = None
        while self._current().type == TokenType.PERCENT:
            self._take()
            self._copy_trivia()
            field = self._current()
            if not field.is_name():
                raise _error(f"Expected component name after '%', found {_describe(field)}", field)
            self._take()
            path.append(field.value.lower())
            self._copy_trivia()
            field_subscript = None
            if self._current().type == TokenType.LPAREN:
                field_subscript = self._copy_index_span()
                self._copy_trivia()

        assign = self._current()
        if assign.type != TokenType.ASSIGN:
            raise _error(f"Expected '=' after '{base}', found {_describe(assign)}", assign)
        self._take()

        start = self._pos
        value_end = self._value_span_end(start)
        significant = [token for token in self._tokens[start:value_end] if not token.is_trivia]
        replacement = self._replacement_for(patch_group, base, subscript, path)

        if replacement is None:
            while self._pos < value_end:
                self._take()
            items = _read_values(significant)
        else:
            text = replacement.to_fortran_string()
            if text.endswith(",") and self._next_significant(value_end - 1).type == TokenType.COMMA:
                # The separator after the span already closes a trailing null.
                text = text[:-1]
            if significant:
                while self._current().is_trivia:
                    self._take()
                self._writer.write(text)
                self._pos = value_end
            else:
                self._writer.write(" " + text)
            items = _items_of(replacement.copy_value())
            if path:
                emitted_fields.setdefault(base, set()).add(tuple(path))
            else:
                emitted.add(base)

        if path:
            _assign(result_group, base, subscript, path, _shape_value(items, field_subscript)[0], None)
        else:
            value, start_indices = _shape_value(items, subscript)
            _assign(result_group, base, subscript, path, value, start_indices)

    @staticmethod
    def _replacement_for(
        patch_group: Group | None,
        base: str,
        subscript: _Subscript | None,
        path: list[str],
    ) -> Value | None:
        """Return the patch value to write for this assignment, if any.

        Whole derived types and derived type arrays are never written inline;
        their fields are substituted individually or appended at group close.
        """
        if patch_group is None:
            return None
        value = patch_group.get(base)
        if value is None:
            return None
        if not path:
            if isinstance(value, (DerivedTypeValue, DerivedTypeArrayValue)):
                return None
            return value
        if subscript is not None or not isinstance(value, DerivedTypeValue):
            return None
        leaf = _lookup_path(value, path)
        if leaf is None or isinstance(leaf, DerivedTypeValue):
            return None
        return leaf

    def _value_span_end(self, start: int) -> int:
        """Index just past the value list starting at ``start``.

        The list ends at the group close, at the start of the next assignment
        (a name followed by ``=``, ``(`` or ``%`` outside parentheses), or at
        end of input. Whitespace and comments after the last value are not
        part of the span, and neither is a single trailing comma. A longer
        run of trailing commas carries null values and belongs to the span.
        """
        depth = 0
        last_end = start
        commas: list[int] = []
        i = start
        while True:
            token = self._tokens[i]
            if token.type == TokenType.EOF:
                break
            if token.is_trivia:
                i += 1
                continue
            if depth == 0:
                if _is_group_terminator(token):
                    break
                if token.is_name() and self._next_significant(i).type in _ASSIGNMENT_FOLLOWERS:
                    break
                if token.type == TokenType.COMMA:
                    commas.append(i)
                    i += 1
                    continue
            if token.type == TokenType.LPAREN:
                depth += 1
            elif token.type == TokenType.RPAREN:
                depth = max(0, depth - 1)
            i += 1
            last_end = i
            commas = []
        if len(commas) > 1:
            return commas[-1] + 1
        return last_end

    # ------------------------------------------------------------------
    # Groups only in the patch
    # ------------------------------------------------------------------

    def _append_unseen_groups(self) -> None:
        newline = self._newline
        for name, group in self._patch.groups():
            if name in self._seen_groups:
                continue
            logger.debug("Appending new group %s", name)
            body = "".join(line + newline for line in group.format_lines(self._options))
            self._writer.write(f"{newline}&{name}{newline}{body}/{newline}")
            self._result.insert_group_object(name, group.copy())


def _detect_newline(tokens: Sequence[Token]) -> str:
    """Return ``"\\r\\n"`` if the input uses Windows line endings, else ``"\\n"``."""
    for token in tokens:
        if token.type == TokenType.WHITESPACE and "\n" in token.value:
            return "\r\n" if "\r\n" in token.value else "\n"
    return "\n"


def _record_unseen(
    result_group: Group,
    patch_group: Group,
    name: str,
    value: Value,
    done: set[tuple[str, ...]],
) -> None:
    """Store a patch value appended at group close in the result, as the text reads back."""
    existing = result_group.get(name)
    if isinstance(value, DerivedTypeValue):
        target = existing if isinstance(existing, DerivedTypeValue) else DerivedTypeValue()
        for path, leaf in _flatten_fields(value):
            if path not in done:
                _assign_path(target.fields, list(path), leaf.copy_value())
        result_group.insert(name, target)
        return
    if isinstance(value, DerivedTypeArrayValue):
        array = existing if isinstance(existing, DerivedTypeArrayValue) else DerivedTypeArrayValue()
        for position, element in enumerate(value.elements):
            while len(array.elements) <= position:
                array.elements.append({})
            for field, item in element.items():
                array.elements[position][field] = item.copy_value()
        result_group.insert(name, array)
        return
    result_group.insert(name, value.copy_value())
    indices = patch_group.get_start_indices(name)
    if indices is not None:
        result_group.set_start_indices(name, indices)
    comment = patch_group.get_comment(name)
    if comment is not None:
        result_group.set_comment(name, comment)
