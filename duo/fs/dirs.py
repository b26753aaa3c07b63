"""Dual-backend directory iteration."""

import os
import typing as tp

import aiofiles.os

from duo.backend import Backend, DualBackend, select_backend


__all__ = ["ReadDir", "DirEntry"]


def _next_entry(it) -> tp.Optional[os.DirEntry]:
    return next(it, None)


def _entry_stat(entry: os.DirEntry, follow_symlinks: bool) -> os.stat_result:
    return entry.stat(follow_symlinks=follow_symlinks)


_aio_next_entry = aiofiles.os.wrap(_next_entry)
_aio_entry_stat = aiofiles.os.wrap(_entry_stat)


class DirEntry(DualBackend):
    """An entry of a directory, returned by :meth:`ReadDir.next_entry`.

    Both backends wrap an :class:`os.DirEntry`. The entry has the backend of the ReadDir that
    returned it.
    """

    __slots__ = ()

    _feature = "aio-fs"

    @property
    def name(self) -> str:
        """The file name of the entry, relative to the directory."""
        return self._inner.name

    @property
    def path(self) -> str:
        """The path of the entry, joined from the directory path and the file name."""
        return self._inner.path

    def inode(self) -> int:
        return self._inner.inode()

    def is_dir(self, follow_symlinks: bool = True) -> bool:
        return self._inner.is_dir(follow_symlinks=follow_symlinks)

    def is_file(self, follow_symlinks: bool = True) -> bool:
        return self._inner.is_file(follow_symlinks=follow_symlinks)

    def is_symlink(self) -> bool:
        return self._inner.is_symlink()

    async def metadata(self, follow_symlinks: bool = False) -> os.stat_result:
        """Returns the status of the entry. Symbolic links are not followed by default."""
        if self._backend is Backend.BLOCKING:
            return _entry_stat(self._inner, follow_symlinks)
        return await _aio_entry_stat(self._inner, follow_symlinks)

    def __fspath__(self):
        return self._inner.path


class ReadDir(DualBackend):
    """A stream of the entries of a directory.

    The blocking backend iterates :func:`os.scandir` on the calling thread. The aio backend
    advances the same iterator in the default executor of the event loop. Entries come in
    arbitrary order, without '.' and '..'.

    Inside an event loop:

    .. code-block:: python

       async with await ReadDir.open("/tmp") as entries:
           async for entry in entries:
               print(entry.name)

    Outside of one, drive :meth:`next_entry` with :func:`duo.aio.srun` until it returns None.
    """

    __slots__ = ()

    _feature = "aio-fs"

    @classmethod
    async def open(cls, path) -> "ReadDir":
        """Starts reading the directory at `path`.

        Raises
        ------
        FileNotFoundError
            if there is no such directory
        NotADirectoryError
            if `path` is not a directory
        """
        if select_backend(cls._feature) is Backend.AIO:
            return cls._wrap(Backend.AIO, await aiofiles.os.scandir(path))
        return cls._wrap(Backend.BLOCKING, os.scandir(path))

    async def next_entry(self) -> tp.Optional[DirEntry]:
        """Returns the next entry, or None once every entry has been returned."""
        if self._backend is Backend.BLOCKING:
            entry = _next_entry(self._inner)
        else:
            entry = await _aio_next_entry(self._inner)
        return None if entry is None else DirEntry._wrap(self._backend, entry)

    def close(self):
        """Releases the resources of the stream. Invoked automatically once it is exhausted."""
        self._inner.close()

    def __aiter__(self):
        return self

    async def __anext__(self) -> DirEntry:
        entry = await self.next_entry()
        if entry is None:
            raise StopAsyncIteration
        return entry

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
