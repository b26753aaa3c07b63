"""Customised logging.

This module extends Python's package `logging`_ with some customisation made specifically for
duobase. Instead of:

.. code-block:: python

   import logging

You do:

.. code-block:: python

   from duo import logg

It will import the logging package plus the additional stuff implemented here.

We use acronym `logg` instead of `log` to avoid naming conflict with the mathematical `log`
function. In addition, the logging functions `critical`, `error`, `warning`, `warn`, `info` and
`debug` have their API extended a bit.

The threshold of the standard handler of the default logger can be set via environment variable
`DUO_LOG_LEVEL` (e.g. 'DEBUG'). It is 'WARNING' by default.

Please see Python package `logging`_ for more details.

.. _logging:
   https://docs.python.org/3/library/logging.html
"""

from logging import *
import functools
import os as _os
import shutil as _su
import sys as _sys
import typing as tp
from contextlib import nullcontext

from colorama import Fore, just_fix_windows_console

from duo import traceback

just_fix_windows_console()


__all__ = [
    "IndentedLoggerAdapter",
    "make_logger",
    "logger",
    "log",
    "critical",
    "error",
    "info",
    "warning",
    "warn",
    "debug",
    "ScopedLog",
    "scoped_log",
    "scoped_critical",
    "scoped_error",
    "scoped_info",
    "scoped_warn",
    "scoped_warning",
    "scoped_debug",
]


# -----------------------------------------------------------------------------
# base implementation
# -----------------------------------------------------------------------------


class IndentedFilter(Filter):
    """Indented filter for indented logger adapter."""

    def __init__(self, indented_logger_adapter):
        super().__init__()
        self.parent = indented_logger_adapter

    def filter(self, record):
        record.indent = self.parent.indent
        return True


class IndentedLoggerAdapter(LoggerAdapter):
    """Logger with indenting capability."""

    def __init__(self, logger, extra=None):
        super().__init__(logger, extra)
        self.indent = 0
        self.last_exception = None

        # add a filter that adds 'indent' to every log record
        self.logger.addFilter(IndentedFilter(self))

    def process(self, msg: tp.Union[str, bytes], kwargs):
        if isinstance(msg, bytes):
            msg = msg.decode()
        return ("  " * self.indent + msg, kwargs)

    def inc(self):
        self.indent += 1

    def dec(self):
        self.indent -= 1

    def setLastException(self, value):
        self.last_exception = value

    def getLastException(self):
        return self.last_exception

    # ----- break mutli-line messages -----

    def _log_lines(self, func, colour, msg, *args, **kwargs):
        if not isinstance(msg, (str, bytes)):
            msg = str(msg)
        if isinstance(msg, bytes):
            msg = msg.decode()
        for m in msg.split("\n"):
            func(colour + m, *args, **kwargs)

    def critical(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(super().critical, Fore.LIGHTRED_EX, msg, *args, **kwargs)

    def error(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(super().error, Fore.LIGHTMAGENTA_EX, msg, *args, **kwargs)

    def warning(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(super().warning, Fore.LIGHTYELLOW_EX, msg, *args, **kwargs)

    warn = warning

    def info(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(super().info, Fore.LIGHTWHITE_EX, msg, *args, **kwargs)

    def debug(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(super().debug, Fore.LIGHTBLUE_EX, msg, *args, **kwargs)

    # ----- scoped logging -----

    def scoped_critical(self, msg: tp.Union[str, bytes], curly: bool = False):
        return ScopedLog(self, CRITICAL, msg=msg, curly=curly)

    def scoped_error(self, msg: tp.Union[str, bytes], curly: bool = False):
        return ScopedLog(self, ERROR, msg=msg, curly=curly)

    def scoped_warning(self, msg: tp.Union[str, bytes], curly: bool = False):
        return ScopedLog(self, WARNING, msg=msg, curly=curly)

    scoped_warn = scoped_warning

    def scoped_info(self, msg: tp.Union[str, bytes], curly: bool = False):
        return ScopedLog(self, INFO, msg=msg, curly=curly)

    def scoped_debug(self, msg: tp.Union[str, bytes], curly: bool = False):
        return ScopedLog(self, DEBUG, msg=msg, curly=curly)

    # ----- useful warning messages -----

    def warn_last_exception(self):
        for x in traceback.format_exc_info(*_sys.exc_info()):
            self.warning(x)


def make_logger(logger_name, max_indent=10, level=None):
    """Make a singleton logger.

    Parameters
    ----------
    logger_name : str
        name of the logger
    max_indent : int
        max number of indents. Default to 10.
    level : int or str, optional
        threshold of the standard handler. If not provided, environment variable
        `DUO_LOG_LEVEL` is consulted, falling back to WARNING.

    Returns
    -------
    IndentedLoggerAdapter
        the logger adapter

    The generated logger has 1 handler, writing to the standard error stream. The logger itself
    captures everything and lets the handler decide. The handler further thresholds at
    `max_indent`.
    """

    if level is None:
        level = _os.environ.get("DUO_LOG_LEVEL", "WARNING").upper()

    logger = getLogger(logger_name)
    logger.setLevel(1)  # capture everything but let the handlers decide
    logger = IndentedLoggerAdapter(logger, extra=None)

    class StdFilter(Filter):
        def __init__(self, max_indent=None, name=""):
            super().__init__(name=name)
            self.max_indent = max_indent

        def filter(self, record):
            if self.max_indent is None:
                return True
            return getattr(record, "indent", 0) <= self.max_indent

    std_handler = StreamHandler()
    std_handler.setLevel(level)
    std_handler.addFilter(StdFilter(max_indent=max_indent))

    # determine some max string lengths
    column_length = _su.get_terminal_size().columns - 13
    log_lvl_length = min(max(int(column_length * 0.03), 1), 8)
    s1 = "{}.{}s ".format(log_lvl_length, log_lvl_length)

    fmt_str = (
        Fore.CYAN
        + "%(asctime)s "
        + Fore.LIGHTGREEN_EX
        + "%(levelname)"
        + s1
        + Fore.WHITE
        + "["
        + Fore.LIGHTMAGENTA_EX
        + "%(name)s"
        + Fore.WHITE
        + "] "
        + Fore.LIGHTWHITE_EX
        + "%(message)s"
        + Fore.RESET
    )
    formatter = Formatter(fmt_str)
    formatter.default_time_format = "%a %H:%M:%S"
    std_handler.setFormatter(formatter)

    logger.logger.addHandler(std_handler)

    return logger


logger = make_logger("duobase")


# -----------------------------------------------------------------------------
# convenient log functions
# -----------------------------------------------------------------------------


def log(
    level: int,
    msg: tp.Union[str, bytes],
    logger: tp.Optional[Logger] = logger,
    *args,
    **kwargs
):
    """Wraps :func:`logging.log` with additional logger keyword.

    Parameters
    ----------
    level : int
        level. Passed as-is to :func:`logging.log`.
    msg : str or bytes
        message. Passed as-is to :func:`logging.log`.
    logger : logging.Logger, optional
        which logger to process the message. Default is the default logger of duobase. If None
        is provided, no message will be logged.
    *args : tuple
        positional arguments passed as-is to :func:`logging.log`.
    *kwargs : dict
        keyword arguments passed as-is to :func:`logging.log`.
    """
    if logger:
        logger.log(level, msg, *args, **kwargs)


def critical(
    msg: tp.Union[str, bytes], logger: tp.Optional[Logger] = logger, *args, **kwargs
):
    """Wraps :func:`logging.critical` with additional logger keyword."""
    if logger:
        logger.critical(msg, *args, **kwargs)


def error(
    msg: tp.Union[str, bytes], logger: tp.Optional[Logger] = logger, *args, **kwargs
):
    """Wraps :func:`logging.error` with additional logger keyword."""
    if logger:
        logger.error(msg, *args, **kwargs)


def warning(
    msg: tp.Union[str, bytes], logger: tp.Optional[Logger] = logger, *args, **kwargs
):
    """Wraps :func:`logging.warning` with additional logger keyword."""
    if logger:
        logger.warning(msg, *args, **kwargs)


warn = warning


def info(
    msg: tp.Union[str, bytes], logger: tp.Optional[Logger] = logger, *args, **kwargs
):
    """Wraps :func:`logging.info` with additional logger keyword."""
    if logger:
        logger.info(msg, *args, **kwargs)


def debug(
    msg: tp.Union[str, bytes], logger: tp.Optional[Logger] = logger, *args, **kwargs
):
    """Wraps :func:`logging.debug` with additional logger keyword."""
    if logger:
        logger.debug(msg, *args, **kwargs)


class ScopedLog:
    """Scoped-log a message.

    >>> from duo import logg
    >>> with logg.ScopedLog(logg.logger, logg.DEBUG, 'hello world'):
    ...     a = 1
    ...     logg.logger.info("Hi there")
    hello world:
      Hi there

    Parameters
    ----------
    indented_logger_adapter : IndentedLoggerAdapter or None
        the logger. If None then does nothing, just passing things through.
    level : int
        logging level (e.g. logging.CRITICAL, logging.INFO, logging.DEBUG, etc)
    msg : str
        message to log
    curly : bool
        whether or not to print a curly bracket
    """

    def __init__(
        self,
        indented_logger_adapter,
        level,
        msg: tp.Union[str, bytes],
        curly: bool = False,
    ):
        self.logger = indented_logger_adapter
        if self.logger is not None and not isinstance(
            self.logger, IndentedLoggerAdapter
        ):
            raise ValueError(
                "Argument `indented_logger_adapter` is expected to be an IndentedLoggerAdapter or None only."
            )

        self.msg = msg
        if self.logger is None:
            self.func = None
        elif level == CRITICAL:
            self.func = self.logger.critical
        elif level == ERROR:
            self.func = self.logger.error
        elif level == WARNING:
            self.func = self.logger.warning
        elif level == INFO:
            self.func = self.logger.info
        elif level == DEBUG:
            self.func = self.logger.debug
        else:
            raise ValueError("Unknown debugging level {}.".format(level))

        self.curly = curly

    def __enter__(self):
        if self.logger:
            self.func("{ " + self.msg if self.curly else self.msg + ":")
            self.logger.inc()
        return self

    def __exit__(self, type, value, traceback_obj):
        if self.logger:
            if self.logger.getLastException() != value:
                self.logger.setLastException(value)

                if type is not None:
                    lines = traceback.format_exc_info(type, value, traceback_obj)
                    for line in lines:
                        self.logger.debug("##{}".format(line))

            self.logger.dec()
            if self.curly:
                self.func("} " + self.msg)


def scoped_log(
    level,
    msg: tp.Union[str, bytes],
    logger: tp.Optional[IndentedLoggerAdapter] = logger,
    curly: bool = False,
):
    """Scoped log function that can be used in a with statement.

    Partial functions derived from the function include: `scoped_critical`, `scoped_error`,
    `scoped_warning`, `scoped_warn`, `scoped_info` and `scoped_debug`.

    Parameters
    ----------
    level : int
        level. Passed as-is to :class:`ScopeLog`.
    msg : str or bytes
        message. Passed as-is to :class:`ScopeLog`.
    logger : IndentedLoggerAdapter, optional
        which logger to process the message. Default is the default logger of duobase. If None
        is provided, a null context is returned.
    curly : bool
        whether or not to print a curly bracket. Passed as-is to :class:`ScopeLog`.
    """

    if logger is None:
        return nullcontext()
    return ScopedLog(logger, level, msg=msg, curly=curly)

scoped_critical = functools.partial(scoped_log, CRITICAL)
scoped_error = functools.partial(scoped_log, ERROR)
scoped_warning = functools.partial(scoped_log, WARNING)
scoped_warn = scoped_warning
scoped_info = functools.partial(scoped_log, INFO)
scoped_debug = functools.partial(scoped_log, DEBUG)
