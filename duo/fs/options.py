"""Builders for opening files and creating directories with custom options."""

import io
import os

import aiofiles
import aiofiles.os

from duo.backend import Backend, dual_function, select_backend

from .file import File


__all__ = ["OpenOptions", "DirBuilder"]


class OpenOptions:
    """Options and flags which can be used to configure how a file is opened.

    Start from `OpenOptions()`, in which every option is off, chain the setters and finish with
    :meth:`open`. The backend of the resulting :class:`File` is selected when it is opened.

    >>> from duo.aio import srun
    >>> opts = OpenOptions().write(True).create(True).append(True)
    >>> f = srun(opts.open, "/tmp/log.txt")  # doctest: +SKIP
    """

    __slots__ = (
        "_read",
        "_write",
        "_append",
        "_truncate",
        "_create",
        "_create_new",
        "_mode",
        "_custom_flags",
    )

    def __init__(self):
        self._read = False
        self._write = False
        self._append = False
        self._truncate = False
        self._create = False
        self._create_new = False
        self._mode = 0o666
        self._custom_flags = 0

    def read(self, read: bool) -> "OpenOptions":
        """Sets the option for read access."""
        self._read = read
        return self

    def write(self, write: bool) -> "OpenOptions":
        """Sets the option for write access."""
        self._write = write
        return self

    def append(self, append: bool) -> "OpenOptions":
        """Sets the option for appending. It implies write access."""
        self._append = append
        return self

    def truncate(self, truncate: bool) -> "OpenOptions":
        """Sets the option for truncating an existing file to length 0. Needs write access."""
        self._truncate = truncate
        return self

    def create(self, create: bool) -> "OpenOptions":
        """Sets the option to create the file if it does not exist. Needs write access."""
        self._create = create
        return self

    def create_new(self, create_new: bool) -> "OpenOptions":
        """Sets the option to create a new file, failing if it exists.

        If set, :meth:`create` and :meth:`truncate` are ignored.
        """
        self._create_new = create_new
        return self

    def mode(self, mode: int) -> "OpenOptions":
        """Sets the permission bits of a created file, before the umask. Default is 0o666."""
        self._mode = mode
        return self

    def custom_flags(self, flags: int) -> "OpenOptions":
        """Sets extra flags passed to :func:`os.open`, like :data:`os.O_NOFOLLOW`."""
        self._custom_flags = flags
        return self

    def _flags(self):
        """Returns the flags for :func:`os.open` and the mode for :func:`open`."""
        writable = self._write or self._append
        if not self._read and not writable:
            raise ValueError("Opening a file needs read, write or append access.")
        if not writable and (self._truncate or self._create or self._create_new):
            raise ValueError("Creating or truncating a file needs write or append access.")
        if self._append and self._truncate and not self._create_new:
            raise ValueError("Appending to a file excludes truncating it.")

        if self._read and writable:
            flags, mode = os.O_RDWR, "a+b" if self._append else "r+b"
        elif writable:
            flags, mode = os.O_WRONLY, "ab" if self._append else "wb"
        else:
            flags, mode = os.O_RDONLY, "rb"

        if self._append:
            flags |= os.O_APPEND
        if self._create_new:
            flags |= os.O_CREAT | os.O_EXCL
        else:
            if self._create:
                flags |= os.O_CREAT
            if self._truncate:
                flags |= os.O_TRUNC
        return flags | self._custom_flags, mode

    async def open(self, path) -> File:
        """Opens a file at `path` with the options of self.

        Raises
        ------
        ValueError
            if the combination of options is invalid
        OSError
            if the file cannot be opened
        """
        flags, mode = self._flags()
        perm = self._mode

        # the flags derived from `mode` by open() are replaced with our own
        def opener(file, _flags):
            return os.open(file, flags, perm)

        if select_backend(File._feature) is Backend.AIO:
            return File._wrap(Backend.AIO, await aiofiles.open(path, mode=mode, opener=opener))
        return File._wrap(Backend.BLOCKING, io.open(path, mode=mode, opener=opener))

    def __repr__(self):
        on = [name[1:] for name in self.__slots__[:6] if getattr(self, name)]
        return "OpenOptions({}, mode={:o})".format("|".join(on) or "none", self._mode)


def _makedirs(path, mode):
    os.makedirs(path, mode=mode, exist_ok=True)


_create_dir = dual_function(os.mkdir, aiofiles.os.mkdir, feature=File._feature)
_create_dir_all = dual_function(
    _makedirs, aiofiles.os.wrap(_makedirs), feature=File._feature
)


class DirBuilder:
    """A builder for creating directories with custom options.

    >>> from duo.aio import srun
    >>> srun(DirBuilder().recursive(True).mode(0o700).create, "/tmp/a/b/c")  # doctest: +SKIP
    """

    __slots__ = ("_recursive", "_mode")

    def __init__(self):
        self._recursive = False
        self._mode = 0o777

    def recursive(self, recursive: bool) -> "DirBuilder":
        """Sets the option to create missing parents, and to succeed if the directory exists."""
        self._recursive = recursive
        return self

    def mode(self, mode: int) -> "DirBuilder":
        """Sets the permission bits of created directories, before the umask. Default is 0o777."""
        self._mode = mode
        return self

    async def create(self, path):
        """Creates a directory at `path` with the options of self.

        The backend is selected on each invocation, like for the free functions of
        :mod:`duo.fs`.
        """
        if self._recursive:
            await _create_dir_all(path, self._mode)
        else:
            await _create_dir(path, self._mode)

    def __repr__(self):
        return "DirBuilder(recursive={}, mode={:o})".format(self._recursive, self._mode)
