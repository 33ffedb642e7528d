"""Exceptions produced when VMF text fails to parse.

The parser is generic over the exception class it raises, allowing the amount of diagnostic
detail kept to be chosen. Every class implements the same two hooks:

* :py:meth:`VMFSyntaxError.from_error_kind` constructs the failure at the point it occurred.
* :py:meth:`VMFSyntaxError.add_context` is called as the failure propagates outward through each
  parser, attaching a short description of what was being parsed.

Four implementations are provided, from most to least detailed:

* :py:class:`VerboseError` records every context, forming a chain back to the outermost parser.
* :py:class:`SimpleError` records the position, category and innermost context message.
* :py:class:`PositionError` records only the position and category.
* :py:class:`BareError` records nothing at all.

Whichever is used, exactly the same inputs are accepted and rejected.
"""
from typing import List, Optional, Tuple
from typing_extensions import Self
from enum import Enum
import os

from vmfkit import StringPath


__all__ = [
    'ErrorKind', 'VMFSyntaxError',
    'VerboseError', 'SimpleError', 'PositionError', 'BareError',
    'format_exc_fileinfo',
]


def format_exc_fileinfo(
    msg: str,
    file: Optional[StringPath],
    line_num: Optional[int],
    column: Optional[int] = None,
) -> str:
    """If a line number or file is provided, include those in the error message."""
    if file is None and line_num is None:
        return msg
    parts = [msg]
    if line_num is not None:
        parts.append(f'\nError occurred on line {line_num}')
        if column is not None:
            parts.append(f', column {column}')
        if file is not None:
            parts.append(f', with file "{os.fspath(file)}".')
        else:
            parts.append('.')
    else:
        parts.append(f'\nError occurred with file "{os.fspath(file)}".')
    return ''.join(parts)


def _line_col(source: str, pos: int) -> Tuple[int, int]:
    """Convert a character offset into a 1-based line and column."""
    line_start = source.rfind('\n', 0, pos) + 1
    return source.count('\n', 0, pos) + 1, pos - line_start + 1


class ErrorKind(Enum):
    """The coarse category of a syntax error."""
    MALFORMED_IDENTIFIER = 'malformed identifier'  #: A block name was missing or invalid.
    MISSING_OPEN_BRACE = "missing '{'"  #: A block name was not followed by ``{``.
    MISSING_CLOSE_BRACE = "missing '}'"  #: A block was not closed, in strict mode.
    MALFORMED_STRING = 'malformed string'  #: A quoted string was absent or unterminated.
    NOT_IGNORABLE = 'not a comment or whitespace'  #: Expected a comment or whitespace.
    NO_MATCH_IN_BLOCK = 'no parsers matched in block'  #: Unrecognised text inside a block.
    EMPTY_DOCUMENT = 'empty document'  #: The text did not contain any blocks.
    NESTING_TOO_DEEP = 'nesting too deep'  #: Blocks were nested past the configured limit.


class VMFSyntaxError(Exception):
    """Base class for all errors produced when parsing VMF text.

    The string representation will include the file, line and column if known.
    Subclasses choose how much information is actually retained.
    """
    kind: Optional[ErrorKind] = None
    """The category of the original failure, or ``None`` if not recorded."""
    pos: Optional[int] = None
    """The character offset of the original failure, or ``None`` if not recorded."""
    filename: Optional[str] = None
    """The filename of the file being parsed, or ``None`` if not known."""
    _source: Optional[str] = None

    @classmethod
    def from_error_kind(cls, text: str, pos: int, kind: ErrorKind) -> Self:
        """Construct the error for a failure occurring at this position."""
        raise NotImplementedError

    def add_context(self, text: str, pos: int, context: str) -> Self:
        """Record that the failure occurred while parsing ``context``, starting at ``pos``.

        This returns the error itself. By default, contexts are discarded.
        """
        return self

    def apply_filename(self, filename: Optional[StringPath]) -> None:
        """Set the filename, if one was not already known."""
        if filename is not None and self.filename is None:
            self.filename = os.fspath(filename)

    @property
    def line_num(self) -> Optional[int]:
        """The line where the error occurred, or ``None`` if not recorded."""
        if self._source is None or self.pos is None:
            return None
        return _line_col(self._source, self.pos)[0]

    @property
    def column(self) -> Optional[int]:
        """The column where the error occurred, or ``None`` if not recorded."""
        if self._source is None or self.pos is None:
            return None
        return _line_col(self._source, self.pos)[1]

    @property
    def message(self) -> str:
        """The error message, without the location."""
        if self.kind is None:
            return 'Invalid VMF syntax!'
        return f'Invalid VMF syntax: {self.kind.value}!'

    def __str__(self) -> str:
        """Generate the complete error message.

        This includes the line number, column and file, if available.
        """
        return format_exc_fileinfo(self.message, self.filename, self.line_num, self.column)

    # This is mutable.
    __hash__ = None  # type: ignore[assignment]


class VerboseError(VMFSyntaxError):
    """Records the full chain of contexts the failure propagated through.

    :py:attr:`contexts` is ordered from the innermost parser outward.
    """
    kind: ErrorKind
    pos: int
    contexts: List[Tuple[int, str]]
    """Each ``(position, description)`` pair added while the error propagated."""

    def __init__(self, kind: ErrorKind, pos: int, source: Optional[str] = None) -> None:
        super().__init__()
        self.kind = kind
        self.pos = pos
        self._source = source
        self.contexts = []

    @classmethod
    def from_error_kind(cls, text: str, pos: int, kind: ErrorKind) -> Self:
        """Construct the error for a failure occurring at this position."""
        return cls(kind, pos, text)

    def add_context(self, text: str, pos: int, context: str) -> Self:
        """Append the context to the chain."""
        self.contexts.append((pos, context))
        return self

    @property
    def message(self) -> str:
        """The error message, listing every context."""
        lines = [super().message]
        for pos, context in self.contexts:
            if self._source is not None:
                line, col = _line_col(self._source, pos)
                lines.append(f'- {context} (line {line}, column {col})')
            else:
                lines.append(f'- {context} (offset {pos})')
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return f'VerboseError({self.kind!r}, {self.pos!r}, contexts={self.contexts!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VerboseError):
            return (
                self.kind is other.kind and
                self.pos == other.pos and
                self.contexts == other.contexts and
                self.filename == other.filename
            )
        return NotImplemented


class SimpleError(VMFSyntaxError):
    """Records the position, category and a single message.

    The message is the innermost context added, the one closest to the failure.
    """
    kind: ErrorKind
    pos: int
    context: Optional[str]

    def __init__(
        self,
        kind: ErrorKind,
        pos: int,
        context: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.kind = kind
        self.pos = pos
        self.context = context
        self._source = source

    @classmethod
    def from_error_kind(cls, text: str, pos: int, kind: ErrorKind) -> Self:
        """Construct the error for a failure occurring at this position."""
        return cls(kind, pos, source=text)

    def add_context(self, text: str, pos: int, context: str) -> Self:
        """Keep the first context only."""
        if self.context is None:
            self.context = context
        return self

    @property
    def message(self) -> str:
        """The error message."""
        if self.context is not None:
            return f'Invalid VMF syntax: {self.context}!'
        return super().message

    def __repr__(self) -> str:
        return f'SimpleError({self.kind!r}, {self.pos!r}, {self.context!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SimpleError):
            return (
                self.kind is other.kind and
                self.pos == other.pos and
                self.context == other.context and
                self.filename == other.filename
            )
        return NotImplemented


class PositionError(VMFSyntaxError):
    """Records only the position and category of the failure."""
    kind: ErrorKind
    pos: int

    def __init__(self, kind: ErrorKind, pos: int, source: Optional[str] = None) -> None:
        super().__init__()
        self.kind = kind
        self.pos = pos
        self._source = source

    @classmethod
    def from_error_kind(cls, text: str, pos: int, kind: ErrorKind) -> Self:
        """Construct the error for a failure occurring at this position."""
        return cls(kind, pos, text)

    def __repr__(self) -> str:
        return f'PositionError({self.kind!r}, {self.pos!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PositionError):
            return self.kind is other.kind and self.pos == other.pos
        return NotImplemented


class BareError(VMFSyntaxError):
    """Records nothing, only indicating that parsing failed."""

    @classmethod
    def from_error_kind(cls, text: str, pos: int, kind: ErrorKind) -> Self:
        """Construct the error, discarding all information."""
        return cls()

    def apply_filename(self, filename: Optional[StringPath]) -> None:
        """Filenames are not recorded."""

    def __repr__(self) -> str:
        return 'BareError()'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BareError):
            return True
        return NotImplemented
