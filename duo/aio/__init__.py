"""Useful subroutines dealing with the two execution modes of duobase.

Code written with duobase runs in one of two modes. In asynchronous mode it runs inside a
coroutine driven by an asyncio event loop and yields control back to the loop whenever it waits.
In synchronous mode it runs to completion on the calling thread using ordinary blocking calls.

The mode is never passed around as an argument. Instead, :func:`is_async_context` tells whether
the current call stack runs under an active event loop. Every dual-backend resource (see
:mod:`duo.backend`) asks it once, when it is constructed, and sticks to the answer for its whole
lifetime.

An asyn function is declared with 'async def'. When all the resources it touches are in
blocking mode it never actually yields, and it can be invoked without an event loop via
:func:`block_on` or :func:`srun`. That is how the sync facades generated by :mod:`duo.facade`
share one implementation with their aio siblings.
"""

from .context import *
from .base import *

__api__ = [
    "is_async_context",
    "block_on",
    "srun",
    "SuspensionError",
]
