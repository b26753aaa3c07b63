"""Dual-backend handles to the standard streams of the process."""

import sys

import aiofiles

from duo.backend import Backend, DualBackend, dual_method, select_backend


__all__ = ["Stdin", "Stdout", "Stderr", "stdin", "stdout", "stderr"]


class _StdStream(DualBackend):
    __slots__ = ()

    _feature = "aio-io"

    def fileno(self) -> int:
        return self._inner.fileno()


class Stdin(_StdStream):
    """A handle to the standard input of the process, in binary mode.

    The blocking backend is the binary buffer of :data:`sys.stdin`. The aio backend is
    :data:`aiofiles.stdin_bytes`, which reads in the default executor of the event loop.
    """

    __slots__ = ()

    read = dual_method("read", "Reads at most `size` bytes, or until EOF if `size` is -1.")
    readline = dual_method("readline", "Reads until a newline or EOF.")


class _StdWriter(_StdStream):
    __slots__ = ()

    async def write(self, data) -> int:
        """Writes bytes, or a str encoded in UTF-8. Returns the number of bytes written."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if self._backend is Backend.BLOCKING:
            return self._inner.write(data)
        return await self._inner.write(data)

    flush = dual_method("flush", "Flushes the write buffers of the stream.")


class Stdout(_StdWriter):
    """A handle to the standard output of the process, in binary mode.

    The blocking backend is the binary buffer of :data:`sys.stdout`. The aio backend is
    :data:`aiofiles.stdout_bytes`.
    """

    __slots__ = ()


class Stderr(_StdWriter):
    """A handle to the standard error of the process, in binary mode.

    The blocking backend is the binary buffer of :data:`sys.stderr`. The aio backend is
    :data:`aiofiles.stderr_bytes`.
    """

    __slots__ = ()


def stdin() -> Stdin:
    """Constructs a handle to the standard input, selecting the backend depending on whether an
    event loop is running."""
    if select_backend(Stdin._feature) is Backend.AIO:
        return Stdin.from_aio(aiofiles.stdin_bytes)
    return Stdin.from_blocking(sys.stdin.buffer)


def stdout() -> Stdout:
    """Constructs a handle to the standard output."""
    if select_backend(Stdout._feature) is Backend.AIO:
        return Stdout.from_aio(aiofiles.stdout_bytes)
    return Stdout.from_blocking(sys.stdout.buffer)


def stderr() -> Stderr:
    """Constructs a handle to the standard error."""
    if select_backend(Stderr._feature) is Backend.AIO:
        return Stderr.from_aio(aiofiles.stderr_bytes)
    return Stderr.from_blocking(sys.stderr.buffer)
