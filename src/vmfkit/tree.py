"""The tree of blocks and properties produced by parsing a VMF file.

A :py:class:`Document` holds the top-level blocks of a file. Each :py:class:`Block` then has a
name, a list of :py:class:`Property` key-value pairs, and a list of child blocks. Keys do not need
to be unique, and all orderings are preserved exactly.

Trees are generic over how text is stored (see :py:mod:`vmfkit.text`), but trees using
different representations compare equal if the text is the same.

Serialising produces the canonical form, using tabs for indentation::

    >>> doc = Document([
    ...     Block('world', [Property('id', '12')], [
    ...         Block('solid', [Property('id', '5')]),
    ...     ]),
    ...     Block('entity', [Property('classname', 'info_player_start')]),
    ... ])
    >>> print(doc)  # doctest: +NORMALIZE_WHITESPACE
    world
    {
        "id" "12"
        solid
        {
            "id" "5"
        }
    }
    entity
    {
        "classname" "info_player_start"
    }

Alternatively, the IDs of worlds, solids, sides and entities can be regenerated while
serialising, based on the order they appear in the file::

    >>> print(doc.to_string_new_ids())  # doctest: +NORMALIZE_WHITESPACE
    world
    {
        "id" "1"
        solid
        {
            "id" "1"
        }
    }
    entity
    {
        "id" "1"
        "classname" "info_player_start"
    }
"""
from typing import (
    Any, ClassVar, FrozenSet, Generic, Iterable, Iterator, List, Optional, Protocol, TypeVar,
    cast,
)
from typing_extensions import overload
import io
import re

import attrs

from vmfkit.text import TextView


__all__ = ['Property', 'Block', 'Document', 'IDState']

S = TypeVar('S')
K = TypeVar('K')
V = TypeVar('V')

_VALID_NAME = re.compile(r'[A-Za-z0-9_]+')


class _SupportsWrite(Protocol):
    """We accept any file object with a ``write()`` method."""
    def write(self, data: str, /) -> object: ...


def _validate_name(inst: object, attr: 'attrs.Attribute[Any]', value: object) -> None:
    """Block names must be a valid identifier, otherwise they could not be parsed back."""
    if _VALID_NAME.fullmatch(str(value)) is None:
        raise ValueError(f'Invalid block name {value!r}, must be letters, digits or underscores!')


def _validate_text(inst: object, attr: 'attrs.Attribute[Any]', value: object) -> None:
    """Quotes cannot be escaped, so keys and values containing them would not parse back."""
    if isinstance(value, TextView):
        found = value.source.find('"', value.start, value.end) != -1
    else:
        found = '"' in str(value)
    if found:
        raise ValueError(f'Property {attr.name}s cannot contain quotes: {value!r}')


@attrs.define
class IDState:
    """The counters used to regenerate IDs while serialising.

    Each counter is the last ID handed out for that class, so the first block of each gets ``1``.
    A fresh state is used for each serialisation call.
    """
    CLASSES: ClassVar[FrozenSet[str]] = frozenset({'world', 'solid', 'side', 'entity'})

    world: int = 0
    solid: int = 0
    side: int = 0
    entity: int = 0

    def next_id(self, classname: object) -> Optional[int]:
        """Produce the next ID for this block name, or ``None`` if it does not get renumbered."""
        name = str(classname)
        if name not in self.CLASSES:
            return None
        new_id: int = getattr(self, name) + 1
        setattr(self, name, new_id)
        return new_id


@attrs.define
class Property(Generic[K, V]):
    """A single ``"key" "value"`` pair. Either may be blank, but neither may contain ``"``."""
    key: K = attrs.field(validator=_validate_text)
    value: V = attrs.field(validator=_validate_text)

    def __str__(self) -> str:
        return f'"{self.key}" "{self.value}"'


@attrs.define
class Block(Generic[S]):
    """A named block, containing properties and further blocks."""
    name: S = attrs.field(validator=_validate_name)
    props: List[Property[S, S]] = attrs.Factory(list)
    blocks: List['Block[S]'] = attrs.Factory(list)

    def iter_children(self) -> Iterator['Block[S]']:
        """Iterate over the blocks directly inside this one, but not their own children."""
        return iter(self.blocks)

    def add_prop(self, key: S, value: S) -> Property[S, S]:
        """Append a new property to the end of the block, then return it."""
        prop = Property(key, value)
        self.props.append(prop)
        return prop

    def add_block(self, block: 'Block[S]') -> 'Block[S]':
        """Append a child block to the end of this block, then return it."""
        if not isinstance(block, Block):
            raise TypeError(f'{type(block).__name__} is not a Block!')
        self.blocks.append(block)
        return block

    def __str__(self) -> str:
        return self.serialise()

    @overload
    def serialise(self, file: _SupportsWrite, /, *, new_ids: bool = False) -> None: ...
    @overload
    def serialise(self, /, *, new_ids: bool = False) -> str: ...

    def serialise(
        self,
        file: Optional[_SupportsWrite] = None,
        /, *,
        new_ids: bool = False,
    ) -> Optional[str]:
        """Serialise this block to a file, or return as a string.

        :param file: The file to write to. If omitted, the data is returned instead.
        :param new_ids: If set, regenerate the IDs of worlds, solids, sides and entities, \
          counting from this block.
        """
        buffer: Optional[io.StringIO] = None
        if file is None:
            file = buffer = io.StringIO()
        self._serialise(file, '', IDState() if new_ids else None)
        if buffer is not None:
            return buffer.getvalue()
        return None

    def _serialise(self, file: _SupportsWrite, indent: str, ids: Optional[IDState]) -> None:
        """Implements serialise(). The closing brace is not followed by a newline."""
        file.write(f'{indent}{self.name}\n{indent}{{\n')
        child_indent = indent + '\t'
        props: Iterable[Property[S, S]] = self.props
        if ids is not None:
            new_id = ids.next_id(self.name)
            if new_id is not None:
                # Replace any existing IDs with our own.
                file.write(f'{child_indent}"id" "{new_id}"\n')
                props = [prop for prop in self.props if prop.key != 'id']
        for prop in props:
            file.write(f'{child_indent}"{prop.key}" "{prop.value}"\n')
        for block in self.blocks:
            block._serialise(file, child_indent, ids)
            file.write('\n')
        file.write(f'{indent}}}')


class Document(Generic[S]):
    """The complete contents of a VMF file, a sequence of top-level blocks.

    This wraps a block named :py:attr:`ROOT_NAME` with no properties, and forwards most
    operations to that. Only the children of the root are serialised.
    """
    __slots__ = ('inner', )
    ROOT_NAME: ClassVar[str] = 'root'
    inner: Block[S]  #: The root block.

    def __init__(self, blocks: Iterable[Block[S]] = ()) -> None:
        self.inner = Block(cast(S, self.ROOT_NAME), [], list(blocks))

    @classmethod
    def from_root(cls, root: Block[S]) -> 'Document[S]':
        """Wrap an existing root block, without copying it."""
        if root.name != cls.ROOT_NAME:
            raise ValueError(f'Root blocks must be named "{cls.ROOT_NAME}", not {root.name!r}!')
        if root.props:
            raise ValueError('Root blocks cannot have properties!')
        doc: Document[S] = cls.__new__(cls)
        doc.inner = root
        return doc

    @property
    def root(self) -> Block[S]:
        """The root block. Modifications to this are reflected in the document."""
        return self.inner

    @property
    def name(self) -> S:
        """The name of the root block, always :py:attr:`ROOT_NAME`."""
        return self.inner.name

    @property
    def props(self) -> List[Property[S, S]]:
        """The properties of the root block. These are never serialised."""
        return self.inner.props

    @property
    def blocks(self) -> List[Block[S]]:
        """The top-level blocks."""
        return self.inner.blocks

    def iter_children(self) -> Iterator[Block[S]]:
        """Iterate over the top-level blocks."""
        return self.inner.iter_children()

    def add_block(self, block: Block[S]) -> Block[S]:
        """Append a block to the end of the document, then return it."""
        return self.inner.add_block(block)

    def __iter__(self) -> Iterator[Block[S]]:
        return iter(self.inner.blocks)

    def __len__(self) -> int:
        return len(self.inner.blocks)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Document):
            return self.inner == other.inner
        return NotImplemented

    # This is mutable.
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f'Document({self.inner.blocks!r})'

    def __str__(self) -> str:
        return self.serialise()

    def to_string_new_ids(self) -> str:
        """Serialise to a string, regenerating IDs for worlds, solids, sides and entities.

        Any existing ``id`` properties on those are discarded.
        """
        return self.serialise(new_ids=True)

    @overload
    def serialise(self, file: _SupportsWrite, /, *, new_ids: bool = False) -> None: ...
    @overload
    def serialise(self, /, *, new_ids: bool = False) -> str: ...

    def serialise(
        self,
        file: Optional[_SupportsWrite] = None,
        /, *,
        new_ids: bool = False,
    ) -> Optional[str]:
        """Serialise the document to a file, or return as a string.

        Each top-level block is separated by a newline, with none after the last block.

        :param file: The file to write to. If omitted, the data is returned instead.
        :param new_ids: If set, regenerate the IDs of worlds, solids, sides and entities \
          based on the order they appear. Any existing IDs are discarded.
        """
        buffer: Optional[io.StringIO] = None
        if file is None:
            file = buffer = io.StringIO()

        ids = IDState() if new_ids else None
        for i, block in enumerate(self.inner.blocks):
            if i:
                file.write('\n')
            block._serialise(file, '', ids)

        if buffer is not None:
            return buffer.getvalue()
        return None
