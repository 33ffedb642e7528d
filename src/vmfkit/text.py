"""Controls how names, keys and values are stored in a parsed tree.

The parser never builds strings itself. Instead, it calls a *text factory* with the source buffer
and the start/end offsets of each piece of text, allowing the choice of representation to be made
by the caller:

* :py:func:`owned` slices out an independent :external:py:class:`str` copy. This is the default.
* :py:class:`TextView` keeps a reference to the source buffer, only copying the text when
  :external:py:class:`str` is called on it.

Both compare equal to the equivalent string, so trees produced with either are interchangeable::

    >>> view = TextView('"key" "value"', 1, 4)
    >>> view
    TextView('key')
    >>> view == 'key' == owned('"key" "value"', 1, 4)
    True
"""
from typing import Optional, Protocol, TypeVar


__all__ = ['TextFactory', 'TextView', 'owned']

S_co = TypeVar('S_co', covariant=True)


class TextFactory(Protocol[S_co]):
    """Produces the stored representation for ``source[start:end]``."""
    def __call__(self, source: str, start: int, end: int, /) -> S_co: ...


def owned(source: str, start: int, end: int, /) -> str:
    """Copy the text out of the source buffer."""
    return source[start:end]


class TextView:
    """A read-only view into a section of a larger string, avoiding a copy.

    This compares and hashes identically to the string it represents, and can be formatted or
    passed to :external:py:class:`str` to retrieve the text. As long as any view is alive, the
    entire source buffer is kept in memory.
    """
    __slots__ = ('source', 'start', 'end')
    source: str  #: The complete buffer this is a view into.
    start: int  #: The index of the first character.
    end: int  #: The index after the last character.

    def __init__(self, source: str, start: int = 0, end: Optional[int] = None) -> None:
        if not isinstance(source, str):
            raise TypeError(f'Source must be a string, not {type(source).__name__}!')
        if end is None:
            end = len(source)
        if not 0 <= start <= end <= len(source):
            raise ValueError(f'Invalid range {start}:{end} for a string of length {len(source)}!')
        self.source = source
        self.start = start
        self.end = end

    def __str__(self) -> str:
        return self.source[self.start:self.end]

    def __repr__(self) -> str:
        return f'TextView({str(self)!r})'

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)

    def __len__(self) -> int:
        return self.end - self.start

    def __bool__(self) -> bool:
        return self.end != self.start

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            # Compare in-place, without slicing.
            return (
                len(other) == self.end - self.start
                and self.source.startswith(other, self.start, self.end)
            )
        if isinstance(other, TextView):
            if (
                self.source is other.source
                and self.start == other.start
                and self.end == other.end
            ):
                return True
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        # Must match str, so views can be used as keys interchangeably.
        return hash(str(self))
