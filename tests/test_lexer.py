"""Test the lexical primitives."""
from typing import Type

import pytest

from vmfkit.errors import (
    BareError, ErrorKind, PositionError, SimpleError, VerboseError, VMFSyntaxError,
)
from vmfkit.lexer import (
    close_brace, comment, identifier, ignorable, open_brace, skip_ignorable, skip_whitespace,
    string, string_span,
)


ERRORS = [VerboseError, SimpleError, PositionError, BareError]


@pytest.mark.parametrize('text, end', [
    ('ClassName_1', 11),
    ('world{', 5),
    ('a b', 1),
    ('0123_under', 10),
    ('name"value"', 4),
])
def test_identifier(text: str, end: int) -> None:
    """Identifiers are runs of ASCII letters, digits and underscores."""
    assert identifier(text, 0, VerboseError) == end


@pytest.mark.parametrize('text', ['', ' name', '{', '"quoted"', 'ñame', '-dash'])
def test_identifier_invalid(text: str) -> None:
    """Whitespace is not skipped, and non-ASCII letters are not permitted."""
    with pytest.raises(VerboseError) as exc_info:
        identifier(text, 0, VerboseError)
    assert exc_info.value.kind is ErrorKind.MALFORMED_IDENTIFIER
    assert exc_info.value.contexts == [(0, 'bad identifier')]


def test_string() -> None:
    """Strings have no escapes, and can contain anything but quotes."""
    assert string_span('"Value_1"', 0, VerboseError) == (1, 8)
    assert string('"Value_1"', 0, VerboseError) == 9
    assert string_span('""', 0, VerboseError) == (1, 1)
    assert string_span('x"a\\"', 1, VerboseError) == (2, 4)  # The backslash is kept.
    text = '"multi\nline // not a comment {}"'
    assert string(text, 0, VerboseError) == len(text)
    assert string('"first""second"', 0, VerboseError) == 7


@pytest.mark.parametrize('text', ['', 'value', ' "space"', '"unterminated', "'single'"])
def test_string_invalid(text: str) -> None:
    """Test strings must start and end with a quote."""
    with pytest.raises(VerboseError) as exc_info:
        string(text, 0, VerboseError)
    assert exc_info.value.kind is ErrorKind.MALFORMED_STRING
    assert exc_info.value.contexts == [(0, 'string error')]


def test_comment() -> None:
    """Comments run to the end of the line, excluding the newline."""
    assert comment('// comment\nnext', 0, VerboseError) == 10
    assert comment('// comment\r\nnext', 0, VerboseError) == 10
    assert comment('//', 0, VerboseError) == 2
    assert comment('//// "}{"', 0, VerboseError) == 9
    with pytest.raises(VerboseError) as exc_info:
        comment('/ not', 0, VerboseError)
    assert exc_info.value.kind is ErrorKind.NOT_IGNORABLE
    assert exc_info.value.contexts == [(0, 'comment error')]


def test_ignorable() -> None:
    """Ignorable matches one comment or one run of whitespace."""
    assert ignorable(' \t\r\n x', 0, VerboseError) == 5
    assert ignorable('// comment\n  ', 0, VerboseError) == 10
    assert ignorable('  // comment', 0, VerboseError) == 2
    for text in ['', 'x', '"value"', '\v']:
        with pytest.raises(VerboseError) as exc_info:
            ignorable(text, 0, VerboseError)
        assert exc_info.value.kind is ErrorKind.NOT_IGNORABLE
        assert exc_info.value.contexts == [(0, 'ignorable error')]


def test_skipping() -> None:
    """The skip functions never fail."""
    assert skip_whitespace('', 0) == 0
    assert skip_whitespace('x', 0) == 0
    assert skip_whitespace(' \t\n\r x', 0) == 5
    assert skip_whitespace('  // comment', 0) == 2

    assert skip_ignorable('', 0) == 0
    assert skip_ignorable('block', 0) == 0
    assert skip_ignorable('  // one\n\t// two\r\nblock', 0) == 18
    assert skip_ignorable('//', 0) == 2


def test_braces() -> None:
    """Braces consume whitespace on either side."""
    assert open_brace('{', 0, VerboseError) == 1
    assert open_brace('name \n{\n\t"key"', 4, VerboseError) == 9
    assert close_brace('  }  \nnext', 0, VerboseError) == 6
    assert close_brace('}}', 0, VerboseError) == 1

    with pytest.raises(VerboseError) as exc_info:
        open_brace('name  "key"', 4, VerboseError)
    assert exc_info.value.kind is ErrorKind.MISSING_OPEN_BRACE
    assert exc_info.value.pos == 6
    assert exc_info.value.contexts == [(4, "missing '{'")]

    with pytest.raises(VerboseError) as exc_info:
        close_brace(' // }', 0, VerboseError)
    assert exc_info.value.kind is ErrorKind.MISSING_CLOSE_BRACE
    assert exc_info.value.pos == 1
    assert exc_info.value.contexts == [(0, "missing '}'")]


@pytest.mark.parametrize('error', ERRORS)
def test_error_classes(error: Type[VMFSyntaxError]) -> None:
    """Every error class can be used, producing the matching amount of detail."""
    with pytest.raises(error) as exc_info:
        string('block', 0, error)
    exc = exc_info.value
    assert type(exc) is error
    if error is BareError:
        assert exc.kind is None
    else:
        assert exc.kind is ErrorKind.MALFORMED_STRING
        assert exc.pos == 0
    if isinstance(exc, SimpleError):
        assert exc.context == 'string error'
