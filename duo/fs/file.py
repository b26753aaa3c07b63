import io
import os

import aiofiles
import aiofiles.os
from aiofiles.threadpool import wrap as _aio_wrap

from duo.aio import block_on
from duo.backend import Backend, DualBackend, dual_method, select_backend


__all__ = ["File"]


_aio_fsync = aiofiles.os.wrap(os.fsync)
_aio_fstat = aiofiles.os.wrap(os.fstat)


class File(DualBackend):
    """An open file.

    The blocking backend is a file object returned by :func:`open`. The aio backend is an
    asynchronous file object returned by :func:`aiofiles.open`, whose operations run in the
    default executor of the event loop.

    Operations that read, write or move the cursor are asyn methods. In synchronous mode, drive
    them with :func:`duo.aio.srun`.

    >>> from duo.aio import srun
    >>> with srun(File.create, "/tmp/hello.txt") as f:  # doctest: +SKIP
    ...     srun(f.write, b"hello")
    5
    """

    __slots__ = ()

    _feature = "aio-fs"

    @classmethod
    async def open(cls, path, mode: str = "r", **kwargs) -> "File":
        """Opens a file.

        Parameters
        ----------
        path : str or os.PathLike
            path to the file
        mode : str
            the mode in which the file is opened, like in :func:`open`
        kwargs : dict
            other keyword arguments passed as-is to :func:`open` or :func:`aiofiles.open`
        """
        if select_backend(cls._feature) is Backend.AIO:
            return cls._wrap(Backend.AIO, await aiofiles.open(path, mode=mode, **kwargs))
        return cls._wrap(Backend.BLOCKING, io.open(path, mode=mode, **kwargs))

    @classmethod
    async def create(cls, path) -> "File":
        """Opens a file in binary write-only mode, creating it or truncating it."""
        return await cls.open(path, mode="wb")

    @classmethod
    async def create_new(cls, path) -> "File":
        """Creates a new file in binary write-only mode, failing if it exists.

        Raises
        ------
        FileExistsError
            if the file exists
        """
        return await cls.open(path, mode="xb")

    @classmethod
    def from_file(cls, fileobj) -> "File":
        """Adopts an open file object, selecting the backend depending on whether an event loop
        is running."""
        if select_backend(cls._feature) is Backend.AIO:
            return cls.from_aio(_aio_wrap(fileobj))
        return cls.from_blocking(fileobj)

    read = dual_method(
        "read", "Reads at most `size` bytes or characters, or until EOF if `size` is -1."
    )
    readline = dual_method("readline", "Reads until a newline or EOF.")
    write = dual_method("write", "Writes data, returning the number of bytes or characters.")
    seek = dual_method(
        "seek", "Moves the cursor to `offset` relative to `whence`, returning the new position."
    )
    tell = dual_method("tell", "Returns the position of the cursor.")
    flush = dual_method("flush", "Flushes the write buffers.")
    truncate = dual_method(
        "truncate", "Resizes the file to `size`, or to the current position if None is given."
    )
    close = dual_method("close", "Flushes and closes the file.")

    async def sync_all(self):
        """Flushes the write buffers then waits until the data and the metadata are on disk."""
        if self._backend is Backend.BLOCKING:
            self._inner.flush()
            os.fsync(self._inner.fileno())
        else:
            await self._inner.flush()
            await _aio_fsync(self._inner.fileno())

    async def metadata(self) -> os.stat_result:
        """Returns the status of the open file, like :func:`os.fstat`."""
        if self._backend is Backend.BLOCKING:
            return os.fstat(self._inner.fileno())
        return await _aio_fstat(self._inner.fileno())

    def fileno(self) -> int:
        return self._inner.fileno()

    @property
    def name(self):
        return self._inner.name

    @property
    def mode(self) -> str:
        return self._inner.mode

    @property
    def closed(self) -> bool:
        return self._inner.closed

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._backend is Backend.AIO:
            raise TypeError(
                "An aio File cannot be closed without yielding to the event loop. Use `async with`."
            )
        block_on(self.close())
