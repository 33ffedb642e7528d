"""Parse and write Valve Map Format (VMF) files.

VMF files are a series of named blocks, each holding quoted ``"key" "value"``
pairs and further nested blocks::

    // This is a comment.
    ClassName_1
    {
        "Property_1" "Value_1"
        ClassName_2
        {
            "Property_1" "Value_1"
        }
    }

Call :py:func:`parse()` to produce a :py:class:`Document`, then
:py:meth:`Document.serialise()` to write it back out.
"""
from typing import TYPE_CHECKING, Union
from typing_extensions import TypeAlias
import os as _os
import sys as _sys


__version__: str
if not TYPE_CHECKING:
    try:
        from ._version import __version__
    except ImportError:
        __version__ = '<unknown>'
    else:
        # Discard the now-useless module. Use globals so static analysis ignores this.
        del _sys.modules[globals().pop('_version').__name__]

__all__ = [
    '__version__',
    'parse', 'Parser',
    'Document', 'Block', 'Property', 'IDState',
    'TextView', 'TextFactory', 'owned',
    'ErrorKind', 'VMFSyntaxError',
    'VerboseError', 'SimpleError', 'PositionError', 'BareError',
    'StringPath',

    # Submodules:
    'errors', 'lexer', 'logger', 'parser', 'text', 'tree', 'walk',  # pyright: ignore
]

# Pathlike can only be subscripted in 3.9+
StringPath: TypeAlias = Union[str, '_os.PathLike[str]']


# Import these, so people can reference 'vmfkit.Block' instead of 'vmfkit.tree.Block'.
# Should be done after other code, so everything's initialised.
# isort: off
from vmfkit.text import TextFactory, TextView, owned
from vmfkit.errors import (
    ErrorKind, VMFSyntaxError,
    VerboseError, SimpleError, PositionError, BareError,
)
from vmfkit.tree import Block, Document, IDState, Property
from vmfkit.parser import Parser, parse
