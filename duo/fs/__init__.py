"""Dual-backend filesystem access.

:class:`File` wraps a blocking file object when opened outside of an event loop and an
:mod:`aiofiles` file object when opened inside one. :class:`ReadDir` streams the entries of a
directory the same way. The free functions and the builders :class:`OpenOptions` and
:class:`DirBuilder` select their backend on each call. The aio backend is gated by feature
'aio-fs'.

.. code-block:: python

   from duo import fs

   async def main():
       await fs.write("/tmp/a.txt", b"hello")
       async with await fs.File.open("/tmp/a.txt", "rb") as f:
           assert await f.read() == b"hello"
"""

from .file import *
from .options import *
from .dirs import *
from .ops import *

__api__ = [
    "File",
    "OpenOptions",
    "DirBuilder",
    "ReadDir",
    "DirEntry",
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
