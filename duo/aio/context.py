"""The execution-mode oracle."""

import asyncio
import contextvars

from duo import features


__all__ = ["is_async_context"]


# True while a coroutine is being driven by :func:`duo.aio.block_on`
_driven_synchronously = contextvars.ContextVar(
    "duo_driven_synchronously", default=False
)


def is_async_context() -> bool:
    """Returns whether the current code is being executed in an asynchronous context.

    The code is in an asynchronous context if an asyncio event loop is running in the current
    thread and the code is not being driven synchronously via :func:`duo.aio.block_on`, in which
    case nothing would ever resume a suspended operation.

    The function always returns False if feature 'aio' is disabled. It does not modify any state
    and is cheap enough to be invoked every time a resource is constructed.

    Returns
    -------
    bool
        whether or not the caller runs under an active event loop
    """
    if not features.enabled("aio"):
        return False
    if _driven_synchronously.get():
        return False
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
