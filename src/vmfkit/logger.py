"""
Wrapper around logging, used by the parser and the command line tools.

Messages are formatted with :external:py:meth:`str.format()` instead of ``%``. Everything is
logged under the ``vmfkit`` logger, so applications can configure it however they like. The
command line tools call :py:func:`init_logging()` to print messages to the console.
"""
from typing import (
    TYPE_CHECKING, Any, Dict, Generator, List, Mapping, Optional, Tuple, Type, Union, cast,
)
from types import TracebackType
import contextlib
import contextvars
import logging
import os
import sys

from vmfkit import StringPath


__all__ = ['LoggerAdapter', 'get_logger', 'init_logging', 'context', 'DEBUG_ENV']
#: If this environment variable is set to ``1``, debug messages are printed to the console.
DEBUG_ENV = 'VMFKIT_DEBUG'
# Only generic in stubs!
CTX_STACK: 'contextvars.ContextVar[List[str]]' = contextvars.ContextVar('vmfkit_logger')


class LogMessage:
    """Allow using str.format() in logging messages.

    The __str__() method performs the joining.
    """
    fmt: str
    args: Tuple[object, ...]
    kwargs: Dict[str, object]
    has_args: bool

    def __init__(
        self,
        fmt: str,
        args: Tuple[object, ...],
        kwargs: Dict[str, object],
    ) -> None:
        self.fmt = fmt
        self.args = args
        self.kwargs = kwargs
        self.has_args = bool(kwargs or args)

    def format_msg(self) -> str:
        """Format using str.format."""
        # Only format if we have arguments, so braces in VMF text can be logged directly.
        if self.has_args:
            f = self.fmt = str(self.fmt).format(*self.args, **self.kwargs)
            del self.args, self.kwargs
            self.has_args = False
            return f
        else:
            return str(self.fmt)

    def __str__(self) -> str:
        """Format the string, indenting multi-line messages.

        Syntax errors span several lines, so these are kept visually grouped::

            [E] renumber.main(): Invalid VMF syntax!
             | - string error (line 1, column 5)
             |___
        """
        msg = self.format_msg()
        if '\n' not in msg:
            return msg

        lines = msg.split('\n')
        if lines[-1].isspace() or not lines[-1]:
            del lines[-1]
        return '\n | '.join(lines) + '\n |___\n'


_SysExcInfoType = Union[
    Tuple[Type[BaseException], BaseException, Optional[TracebackType]],
    Tuple[None, None, None]
]
if TYPE_CHECKING:  # Only generic in stubs.
    _AdapterBase = logging.LoggerAdapter[logging.Logger]
else:
    _AdapterBase = logging.LoggerAdapter


class LoggerAdapter(_AdapterBase):
    """Fix loggers to use str.format()."""
    logger: logging.Logger
    alias: Optional[str]

    def __init__(self, logger: logging.Logger, alias: Optional[str] = None) -> None:
        # Alias is a replacement module name for log messages.
        self.alias = alias
        self.logger = logger
        logging.LoggerAdapter.__init__(self, logger, extra={})

    def log(
        self,
        level: int,
        msg: Any,
        *args: Any,
        exc_info: Union[None, bool, _SysExcInfoType, BaseException] = None,
        stack_info: bool = False,
        extra: Optional[Mapping[str, object]] = None,
        stacklevel: int = 0,
        **kwargs: Any,
    ) -> None:
        """Log a message, formatting it with ``args`` and ``kwargs`` via :external:py:meth:`str.format()`."""
        if self.isEnabledFor(level):
            try:
                ctx = ', '.join(CTX_STACK.get())
            except LookupError:
                ctx = ''

            new_extra = {} if extra is None else dict(extra)
            new_extra['_vmfkit_alias'] = self.alias
            new_extra['vmfkit_context'] = f' ({ctx})' if ctx else ''

            # Skip over the frames inside LoggerAdapter.
            if sys.version_info >= (3, 10):
                stacklevel += 2

            # noinspection PyProtectedMember
            self.logger._log(
                level,
                LogMessage(str(msg), args, kwargs),
                (),  # Formatting is done by LogMessage.
                extra=new_extra,
                exc_info=exc_info,
                stack_info=stack_info,
                stacklevel=stacklevel,
            )

    def __getattr__(self, attr: str) -> Any:
        """Delegate unknown methods to the logger."""
        return getattr(self.logger, attr)


class Formatter(logging.Formatter):
    """Ensure records from other libraries can still be formatted."""
    def format(self, record: logging.LogRecord) -> str:
        """Ensure a default context is set in the record."""
        record.__dict__.setdefault('vmfkit_context', '')
        return super().format(record)


class NewLogRecord(logging.LogRecord):
    """Allow passing an alias and context for log modules."""
    _vmfkit_alias: Optional[str] = None
    # Can be used by formatters.
    vmfkit_context: str = ''
    module: str

    def getMessage(self) -> str:
        """We have to hook here to change the value of .module.

        It's called just before the formatting call is made.
        """
        if self._vmfkit_alias is not None:
            self.module = self._vmfkit_alias
        return super().getMessage()


def init_logging(
    filename: Optional[StringPath] = None,
    main_logger: str = '',
) -> logging.Logger:
    """Set up the root logger, printing to the console.

    Info messages go to stdout, warnings and errors to stderr. Debug messages are only shown if
    the ``VMFKIT_DEBUG`` environment variable is set to ``1``. This also sets
    :py:func:`sys.excepthook`, so uncaught exceptions are logged.

    :param filename: If this is set, all logs (including debug) will be written to this file too.
    :param main_logger: Specify the name of the logger to produce under the ``vmfkit`` hierarchy.
    """
    factory = logging.getLogRecordFactory()
    if factory is not logging.LogRecord and factory is not NewLogRecord:
        raise ValueError('Unknown record factory: ', factory)
    logging.setLogRecordFactory(NewLogRecord)

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Put more info in the log file, since it's not onscreen.
    long_log_format = Formatter(
        '[{levelname}]{vmfkit_context} {module}.{funcName}(): {message}',
        style='{',
    )
    short_log_format = Formatter(
        # One letter for level name
        '[{levelname[0]}]{vmfkit_context} {module}.{funcName}(): {message}',
        style='{',
    )

    if filename is not None:
        dirname = os.path.dirname(filename)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        log_handler = logging.FileHandler(filename, mode='w', encoding='utf8')
        log_handler.setLevel(logging.DEBUG)
        log_handler.setFormatter(long_log_format)
        logger.addHandler(log_handler)

    stdout_loghandler = logging.StreamHandler(sys.stdout)
    stdout_loghandler.setLevel(
        logging.DEBUG
        if os.environ.get(DEBUG_ENV, '0') == '1' else
        logging.INFO
    )
    stdout_loghandler.setFormatter(short_log_format)

    def ignore_warnings(record: logging.LogRecord) -> bool:
        """Filter out messages higher than WARNING.

        Those are handled by stderr, and we don't want duplicates.
        """
        return record.levelno < logging.WARNING
    stdout_loghandler.addFilter(ignore_warnings)
    logger.addHandler(stdout_loghandler)

    stderr_loghandler = logging.StreamHandler(sys.stderr)
    stderr_loghandler.setLevel(logging.WARNING)
    stderr_loghandler.setFormatter(short_log_format)
    logger.addHandler(stderr_loghandler)

    # Use the exception hook to report uncaught exceptions.
    old_except_handler = sys.excepthook

    def except_handler(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Log uncaught exceptions."""
        if isinstance(exc_value, SystemExit):
            # Suppress messages for this, it's not an error.
            return
        logger.error(
            'Uncaught Exception:',
            exc_info=(exc_type, exc_value, exc_tb),
        )
        # Call the original handler - that prints to the normal console.
        if old_except_handler is not sys.__excepthook__:
            old_except_handler(exc_type, exc_value, exc_tb)

    sys.excepthook = except_handler

    if main_logger:
        return get_logger(main_logger)
    else:
        return cast(logging.Logger, LoggerAdapter(logger))


def get_logger(name: str = '', alias: Optional[str] = None) -> logging.Logger:
    """Get the named logger object.

    This puts the logger into the ``vmfkit`` namespace, and wraps it to
    use :external:py:meth:`str.format()` instead of ``%`` formatting.
    If set, ``alias`` is the name to show for the module.
    """
    if name.startswith('vmfkit.') or name == 'vmfkit':
        # Allow passing __name__ directly.
        log = logging.getLogger(name)
    elif name:
        log = logging.getLogger('vmfkit.' + name)
    else:  # Allow retrieving the main logger.
        log = logging.getLogger('vmfkit')
    return cast(logging.Logger, LoggerAdapter(log, alias))


@contextlib.contextmanager
def context(name: str) -> Generator[str, None, None]:
    """Include additional information in all logs inside this block.

    The scripts use this to tag messages with the file being processed.
    """
    try:
        stack = CTX_STACK.get()
    except LookupError:
        stack = []
        CTX_STACK.set(stack)
    stack.append(name)
    try:
        yield name
    finally:
        popped = stack.pop()
        assert popped is name, f'Popped incorrect value: pop({popped!r}) != ctx({name!r})!'
