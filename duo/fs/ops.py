"""Asyn functions manipulating the filesystem.

Each function has the semantics of its blocking counterpart in :mod:`os` or :mod:`shutil`. In
asynchronous mode it runs in the default executor of the event loop via :mod:`aiofiles`.
"""

import os
import shutil

import aiofiles
import aiofiles.os

from duo.backend import dual_function


__all__ = [
    "canonicalize",
    "copy",
    "create_dir",
    "create_dir_all",
    "exists",
    "hard_link",
    "metadata",
    "read",
    "read_dir",
    "read_link",
    "read_to_string",
    "remove_dir",
    "remove_dir_all",
    "remove_file",
    "rename",
    "symlink_metadata",
    "write",
]


_FEATURE = "aio-fs"


def _canonicalize(path) -> str:
    return os.path.realpath(path, strict=True)


def _copy(src, dst) -> int:
    shutil.copyfile(src, dst)
    shutil.copymode(src, dst)
    return os.stat(dst).st_size


def _create_dir_all(path):
    os.makedirs(path, exist_ok=True)


def _read(path) -> bytes:
    with open(path, mode="rb") as f:
        return f.read()


async def _read_aio(path) -> bytes:
    async with aiofiles.open(path, mode="rb") as f:
        return await f.read()


def _read_dir(path) -> list:
    with os.scandir(path) as it:
        return sorted(it, key=lambda entry: entry.name)


def _read_to_string(path) -> str:
    with open(path, mode="rt", encoding="utf-8") as f:
        return f.read()


async def _read_to_string_aio(path) -> str:
    async with aiofiles.open(path, mode="rt", encoding="utf-8") as f:
        return await f.read()


def _write(path, data):
    if isinstance(data, str):
        with open(path, mode="wt", encoding="utf-8") as f:
            f.write(data)
    else:
        with open(path, mode="wb") as f:
            f.write(data)


async def _write_aio(path, data):
    if isinstance(data, str):
        async with aiofiles.open(path, mode="wt", encoding="utf-8") as f:
            await f.write(data)
    else:
        async with aiofiles.open(path, mode="wb") as f:
            await f.write(data)


canonicalize = dual_function(
    _canonicalize,
    aiofiles.os.wrap(_canonicalize),
    feature=_FEATURE,
    name="canonicalize",
    doc="""Returns the absolute path with all symbolic links resolved.

    Raises
    ------
    FileNotFoundError
        if the path does not exist
    """,
)

copy = dual_function(
    _copy,
    aiofiles.os.wrap(_copy),
    feature=_FEATURE,
    name="copy",
    doc="""Copies the content and the permission bits of a file, returning the number of bytes
    copied. The destination is overwritten if it exists.""",
)

create_dir = dual_function(
    os.mkdir,
    aiofiles.os.mkdir,
    feature=_FEATURE,
    name="create_dir",
    doc="Creates a directory. Its parent must exist.",
)

create_dir_all = dual_function(
    _create_dir_all,
    aiofiles.os.wrap(_create_dir_all),
    feature=_FEATURE,
    name="create_dir_all",
    doc="Creates a directory and all its missing parents. Does nothing if it exists.",
)

exists = dual_function(
    os.path.exists,
    aiofiles.os.path.exists,
    feature=_FEATURE,
    name="exists",
    doc="Checks if a path exists. Returns False for broken symbolic links.",
)

hard_link = dual_function(
    os.link,
    aiofiles.os.link,
    feature=_FEATURE,
    name="hard_link",
    doc="Creates a new hard link `dst` pointing to `src`.",
)

metadata = dual_function(
    os.stat,
    aiofiles.os.stat,
    feature=_FEATURE,
    name="metadata",
    doc="Returns the status of a path, following symbolic links, like :func:`os.stat`.",
)

read = dual_function(
    _read,
    _read_aio,
    feature=_FEATURE,
    name="read",
    doc="Reads the whole content of a file as bytes.",
)

read_dir = dual_function(
    _read_dir,
    aiofiles.os.wrap(_read_dir),
    feature=_FEATURE,
    name="read_dir",
    doc="Returns the entries of a directory as a list of :class:`os.DirEntry` sorted by name.",
)

read_link = dual_function(
    os.readlink,
    aiofiles.os.readlink,
    feature=_FEATURE,
    name="read_link",
    doc="Returns the path a symbolic link points to.",
)

read_to_string = dual_function(
    _read_to_string,
    _read_to_string_aio,
    feature=_FEATURE,
    name="read_to_string",
    doc="Reads the whole content of a file as a UTF-8 string.",
)

remove_dir = dual_function(
    os.rmdir,
    aiofiles.os.rmdir,
    feature=_FEATURE,
    name="remove_dir",
    doc="Removes an empty directory.",
)

remove_dir_all = dual_function(
    shutil.rmtree,
    aiofiles.os.wrap(shutil.rmtree),
    feature=_FEATURE,
    name="remove_dir_all",
    doc="Removes a directory and all its content.",
)

remove_file = dual_function(
    os.remove,
    aiofiles.os.remove,
    feature=_FEATURE,
    name="remove_file",
    doc="Removes a file.",
)

rename = dual_function(
    os.replace,
    aiofiles.os.replace,
    feature=_FEATURE,
    name="rename",
    doc="Renames a file or a directory, replacing the destination if it exists.",
)

symlink_metadata = dual_function(
    os.lstat,
    aiofiles.os.wrap(os.lstat),
    feature=_FEATURE,
    name="symlink_metadata",
    doc="Returns the status of a path without following symbolic links, like :func:`os.lstat`.",
)

write = dual_function(
    _write,
    _write_aio,
    feature=_FEATURE,
    name="write",
    doc="""Creates or truncates a file and writes the whole of `data` to it. A str is encoded in
    UTF-8.""",
)
