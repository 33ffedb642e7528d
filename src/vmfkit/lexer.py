"""The lexical primitives of the VMF grammar.

Each function here operates on a cursor, made up of the complete text and a character offset.
On success the offset after the matched text is returned, otherwise the provided error class is
used to construct the exception to raise. None of these backtrack; a failure leaves the caller's
offset untouched, so it can try something else.

The grammar recognised is as follows:

* ``identifier``: one or more ASCII letters, digits or underscores.
* ``string``: a ``"``, any run of characters other than ``"``, then a closing ``"``.
  There are no escapes, so a quote can never appear inside a value.
* ``comment``: ``//`` up to (but not including) the end of the line.
* ``ignorable``: a comment, or a run of spaces, tabs, carriage returns and newlines.
* ``open_brace``/``close_brace``: the brace character, with any whitespace around it.
"""
from typing import Tuple, Type, TypeVar
import re

from vmfkit.errors import ErrorKind, VMFSyntaxError


__all__ = [
    'identifier', 'string', 'string_span', 'comment', 'ignorable',
    'skip_ignorable', 'skip_whitespace', 'open_brace', 'close_brace',
]

E = TypeVar('E', bound=VMFSyntaxError)

_IDENTIFIER = re.compile(r'[A-Za-z0-9_]+')
_STRING = re.compile(r'"[^"]*"')
_COMMENT = re.compile(r'//[^\r\n]*')
_SPACE = re.compile(r'[ \t\r\n]+')
_IGNORABLE_RUN = re.compile(r'(?:[ \t\r\n]+|//[^\r\n]*)*')
_SPACE_OPT = re.compile(r'[ \t\r\n]*')


def skip_whitespace(text: str, pos: int) -> int:
    """Skip zero or more whitespace characters. This never fails."""
    # A * pattern always matches.
    return _SPACE_OPT.match(text, pos).end()  # type: ignore[union-attr]


def skip_ignorable(text: str, pos: int) -> int:
    """Skip zero or more comments and whitespace runs. This never fails."""
    return _IGNORABLE_RUN.match(text, pos).end()  # type: ignore[union-attr]


def identifier(text: str, pos: int, error: Type[E]) -> int:
    """Match a block name, such as ``ClassName_1``. Whitespace is not consumed."""
    match = _IDENTIFIER.match(text, pos)
    if match is None:
        raise error.from_error_kind(
            text, pos, ErrorKind.MALFORMED_IDENTIFIER,
        ).add_context(text, pos, 'bad identifier')
    return match.end()


def string_span(text: str, pos: int, error: Type[E]) -> Tuple[int, int]:
    """Match a quoted string, returning the start and end of the text inside the quotes."""
    match = _STRING.match(text, pos)
    if match is None:
        raise error.from_error_kind(
            text, pos, ErrorKind.MALFORMED_STRING,
        ).add_context(text, pos, 'string error')
    return pos + 1, match.end() - 1


def string(text: str, pos: int, error: Type[E]) -> int:
    """Match a quoted string, such as ``"Value_1"``. Whitespace is not consumed."""
    return string_span(text, pos, error)[1] + 1


def comment(text: str, pos: int, error: Type[E]) -> int:
    """Match a ``// comment``. The newline at the end is left unconsumed."""
    match = _COMMENT.match(text, pos)
    if match is None:
        raise error.from_error_kind(
            text, pos, ErrorKind.NOT_IGNORABLE,
        ).add_context(text, pos, 'comment error')
    return match.end()


def ignorable(text: str, pos: int, error: Type[E]) -> int:
    """Match either a single comment, or a non-empty run of whitespace."""
    match = _COMMENT.match(text, pos) or _SPACE.match(text, pos)
    if match is None:
        raise error.from_error_kind(
            text, pos, ErrorKind.NOT_IGNORABLE,
        ).add_context(text, pos, 'ignorable error')
    return match.end()


def open_brace(text: str, pos: int, error: Type[E]) -> int:
    """Match a ``{``, along with whitespace on either side."""
    brace = skip_whitespace(text, pos)
    if text[brace:brace + 1] != '{':
        raise error.from_error_kind(
            text, brace, ErrorKind.MISSING_OPEN_BRACE,
        ).add_context(text, pos, "missing '{'")
    return skip_whitespace(text, brace + 1)


def close_brace(text: str, pos: int, error: Type[E]) -> int:
    """Match a ``}``, along with whitespace on either side."""
    brace = skip_whitespace(text, pos)
    if text[brace:brace + 1] != '}':
        raise error.from_error_kind(
            text, brace, ErrorKind.MISSING_CLOSE_BRACE,
        ).add_context(text, pos, "missing '}'")
    return skip_whitespace(text, brace + 1)
