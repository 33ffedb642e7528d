"""The recursive-descent parser for VMF text.

:py:func:`parse()` is the main entry point. It is generic over two choices, both of which are
passed as keyword arguments:

* ``text_type`` is the :py:class:`~vmfkit.text.TextFactory` used to store names, keys and values.
* ``error`` is the :py:class:`~vmfkit.errors.VMFSyntaxError` subclass raised on failure, which
  controls how much information is kept about the failure.

Parsing is deliberately lenient in one respect: if the text ends inside a block, the block
(and any blocks around it) are treated as closed, instead of being rejected. Pass
``strict=True`` to raise an error instead.

Nesting depth is unlimited by default, so deeply nested text could exceed Python's recursion
limit. Set ``max_depth`` to reject such text with a syntax error instead.
"""
from typing import Generic, List, Optional, Tuple, Type, TypeVar, Union
from typing_extensions import overload
import logging

from vmfkit import StringPath, logger
from vmfkit.errors import ErrorKind, VerboseError, VMFSyntaxError
from vmfkit.lexer import (
    close_brace, identifier, ignorable, open_brace, skip_ignorable, skip_whitespace,
    string_span,
)
from vmfkit.text import TextFactory, owned
from vmfkit.tree import Block, Document, Property


__all__ = ['Parser', 'parse']

LOGGER = logger.get_logger(__name__)
S = TypeVar('S')
E = TypeVar('E', bound=VMFSyntaxError)
_BASE_CONSTRUCTOR = VMFSyntaxError.from_error_kind.__func__  # type: ignore[attr-defined]


class _Cut(Exception):
    """Wraps an error which must not be caught by the alternatives in a block.

    This is raised for the depth limit and for unclosed blocks in strict mode. Trying the other
    alternatives could not succeed, and would only produce a less useful error.
    """
    def __init__(self, error: VMFSyntaxError) -> None:
        super().__init__(error)
        self.error = error


class Parser(Generic[S, E]):
    """Holds the configuration for parsing a single piece of text.

    Each method takes a starting offset into the text, then returns the offset after the parsed
    content along with the result. On failure the configured error is raised.
    """
    text: str  #: The complete text being parsed.
    text_type: TextFactory[S]  #: Produces the stored representation of each name, key and value.
    error: Type[E]  #: The exception class to raise.
    strict: bool  #: If set, blocks which are not closed before the end of the text are rejected.
    max_depth: Optional[int]  #: If set, the maximum number of nested blocks permitted.

    def __init__(
        self,
        text: str,
        text_type: TextFactory[S],
        error: Type[E],
        *,
        strict: bool = False,
        max_depth: Optional[int] = None,
    ) -> None:
        # Catch passing direct bytes far in advance.
        if isinstance(text, (bytes, bytearray)):
            raise TypeError(
                'Cannot parse binary data! Decode to the desired encoding first.'
            )
        if not isinstance(text, str):
            raise TypeError(f'Expected a string, not {type(text).__name__}!')
        if (
            not isinstance(error, type)
            or not issubclass(error, VMFSyntaxError)
            # The base class does not implement the constructor.
            or error.from_error_kind.__func__ is _BASE_CONSTRUCTOR  # type: ignore[attr-defined]
        ):
            raise TypeError(f'Invalid error class "{error!r}"!')
        if max_depth is not None and max_depth < 1:
            raise ValueError(f'Maximum depth must be at least 1, not {max_depth}!')
        self.text = text
        self.text_type = text_type
        self.error = error
        self.strict = bool(strict)
        self.max_depth = max_depth

    def __repr__(self) -> str:
        return (
            f'<Parser {self.error.__name__}, strict={self.strict}, '
            f'max_depth={self.max_depth}, {len(self.text)} chars>'
        )

    def keyvalue(self, pos: int) -> Tuple[int, Property[S, S]]:
        """Parse a ``"key" "value"`` pair, along with surrounding whitespace."""
        text = self.text
        start = pos
        try:
            key_start, key_end = string_span(text, skip_whitespace(text, pos), self.error)
            value_start, value_end = string_span(
                text, skip_whitespace(text, key_end + 1),
                self.error,
            )
        except self.error as exc:
            exc.add_context(text, start, 'property error')
            raise
        return skip_whitespace(text, value_end + 1), Property(
            self.text_type(text, key_start, key_end),
            self.text_type(text, value_start, value_end),
        )

    def block(self, pos: int) -> Tuple[int, Block[S]]:
        """Parse a named block, including everything it contains.

        Leading comments and whitespace are skipped.
        """
        try:
            return self._block(pos, 1)
        except _Cut as cut:
            raise cut.error from None

    def _block(self, pos: int, depth: int) -> Tuple[int, Block[S]]:
        """Implements block(). ``depth`` is the nesting level, with top-level blocks being 1."""
        text = self.text
        error = self.error
        name_start = skip_ignorable(text, pos)
        name_end = identifier(text, name_start, error)
        pos = open_brace(text, name_end, error)
        if self.max_depth is not None and depth > self.max_depth:
            raise _Cut(error.from_error_kind(
                text, name_start, ErrorKind.NESTING_TOO_DEEP,
            ).add_context(text, name_start, f'blocks nested more than {self.max_depth} deep'))

        props: List[Property[S, S]] = []
        blocks: List[Block[S]] = []
        # Try each alternative in order, the first to match wins.
        while True:
            try:
                pos, prop = self.keyvalue(pos)
            except error:
                pass
            else:
                props.append(prop)
                continue

            try:
                pos, child = self._block(pos, depth + 1)
            except error:
                pass
            else:
                blocks.append(child)
                continue

            try:
                pos = ignorable(text, pos, error)
            except error:
                pass
            else:
                continue

            try:
                pos = close_brace(text, pos, error)
            except error:
                pass
            else:
                break

            if pos >= len(text):
                if self.strict:
                    raise _Cut(error.from_error_kind(
                        text, pos, ErrorKind.MISSING_CLOSE_BRACE,
                    ).add_context(text, pos, "missing '}'"))
                if LOGGER.isEnabledFor(logging.DEBUG):
                    # Counting lines is only worth it if the message is shown.
                    LOGGER.debug(
                        'Block "{}" on line {} was closed by the end of the text.',
                        text[name_start:name_end],
                        text.count('\n', 0, name_start) + 1,
                    )
                break

            raise error.from_error_kind(
                text, pos, ErrorKind.NO_MATCH_IN_BLOCK,
            ).add_context(text, pos, 'no parsers matched in block')

        return pos, Block(self.text_type(text, name_start, name_end), props, blocks)

    def document(self, pos: int = 0) -> Tuple[int, Document[S]]:
        """Parse one or more top-level blocks, until the end of the text."""
        text = self.text
        blocks: List[Block[S]] = []
        while True:
            pos = skip_ignorable(text, pos)
            if pos >= len(text):
                break
            try:
                pos, block = self._block(pos, 1)
            except _Cut as cut:
                raise cut.error from None
            blocks.append(block)
        if not blocks:
            raise self.error.from_error_kind(
                text, pos, ErrorKind.EMPTY_DOCUMENT,
            ).add_context(text, pos, 'empty document')
        return pos, Document(blocks)


@overload
def parse(
    text: str, *,
    error: Type[VMFSyntaxError] = VerboseError,
    filename: Optional[StringPath] = None,
    strict: bool = False,
    max_depth: Optional[int] = None,
) -> Document[str]: ...
@overload
def parse(
    text: str, *,
    text_type: TextFactory[S],
    error: Type[VMFSyntaxError] = VerboseError,
    filename: Optional[StringPath] = None,
    strict: bool = False,
    max_depth: Optional[int] = None,
) -> Document[S]: ...


def parse(
    text: str, *,
    text_type: Union[TextFactory[S], TextFactory[str]] = owned,
    error: Type[VMFSyntaxError] = VerboseError,
    filename: Optional[StringPath] = None,
    strict: bool = False,
    max_depth: Optional[int] = None,
) -> Union[Document[S], Document[str]]:
    """Parse a complete VMF file, producing a :py:class:`~vmfkit.tree.Document`.

    All comments and whitespace are discarded. The text must contain at least one block, and
    only comments and whitespace may follow the last block.

    :param text: The entire contents of the file.
    :param text_type: Controls how names, keys and values are stored. By default, these are
      copied into independent strings. Pass :py:class:`~vmfkit.text.TextView` to instead
      reference the original text.
    :param error: The exception class raised if parsing fails. This controls how much
      information the error contains.
    :param filename: If set, this is included in any error messages.
    :param strict: If set, blocks must be closed before the end of the text.
    :param max_depth: If set, blocks nested deeper than this produce an error, instead of
      recursing indefinitely.
    """
    parser = Parser(text, text_type, error, strict=strict, max_depth=max_depth)
    try:
        _, doc = parser.document()
    except VMFSyntaxError as exc:
        exc.apply_filename(filename)
        raise
    LOGGER.debug(
        'Parsed {} top-level blocks from {}',
        len(doc), 'text' if filename is None else f'"{filename}"',
    )
    return doc
