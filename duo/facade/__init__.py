"""Generating two call-compatible facades from one implementation.

You write the functionality once, as an ordinary class whose waiting operations are declared
with 'async def' and use dual-backend resources (see :mod:`duo.backend`). Decorating the class
with :func:`dual` generates two facades wrapping it:

- the sync facade, whose operations run to completion on the calling thread. Suspending
  operations are driven with :func:`duo.aio.block_on`;
- the aio facade, whose suspending operations are coroutine functions to be awaited inside an
  event loop. It only exists when its gating feature is enabled (see :mod:`duo.features`).

.. code-block:: python

   from duo import fs
   from duo.facade import dual

   @dual(sync="SyncFsClient", aio="AioFsClient", feature="aio")
   class FsClient:
       def __init__(self, path):
           self.path = path

       @classmethod
       def new(cls, path) -> "FsClient":
           return cls(path)

       async def create(self) -> None:
           f = await fs.File.create(self.path)
           await f.sync_all()
           await f.close()

   SyncFsClient.new("/tmp/a.txt").create()  # no event loop needed
   await AioFsClient.new("/tmp/a.txt").create()  # inside a coroutine

How each operation is rewritten is decided by its declared shape only. See
:func:`generate_facades` for the rules.
"""

from .spec import *
from .generate import *

__api__ = [
    "dual",
    "generate_facades",
    "facades_of",
    "FacadeTarget",
    "FacadePair",
    "FacadeGenerationError",
    "OperationSpec",
    "ParameterSpec",
    "ConstructorKind",
    "TypeDescriptor",
    "describe_type",
    "parse_operations",
    "classify_constructor",
]
