"""Base module dealing with asyn functions and the synchronous driver."""

import inspect

from duo import logg
from duo.traceback import LogicError
from .context import _driven_synchronously


__all__ = ["SuspensionError", "block_on", "srun"]


class SuspensionError(LogicError):
    """Raised when an awaitable driven synchronously turns out to need an event loop.

    This is always a bug in the calling code: :func:`block_on` may only be given operations that
    complete without ever yielding control, for example operations whose resources have all been
    created in blocking mode.
    """


async def _awaiting(aw):
    return await aw


def block_on(aw) -> object:
    """Produces the result of an awaitable synchronously, without any event loop.

    The awaitable is resumed exactly once. If it completes, its result is returned and if it
    raises, the exception propagates as-is. If it yields control instead, meaning it waits for
    something that only an event loop can deliver, it is closed and :class:`SuspensionError` is
    raised. The function never retries, never sleeps and never spawns a thread.

    While the awaitable is being resumed, :func:`duo.aio.is_async_context` returns False, so
    resources created along the way select their blocking backend even if an event loop happens
    to be running in the current thread.

    Parameters
    ----------
    aw : awaitable
        a coroutine or any object implementing `__await__`

    Returns
    -------
    object
        whatever the awaitable returns

    Raises
    ------
    TypeError
        if the argument is not awaitable
    SuspensionError
        if the awaitable does not complete on its first resumption
    """

    if not inspect.isawaitable(aw):
        raise TypeError("An awaitable is expected, but {!r} was given.".format(aw))

    coro = aw if inspect.iscoroutine(aw) else _awaiting(aw)
    token = _driven_synchronously.set(True)
    try:
        yielded = coro.send(None)
    except StopIteration as e:
        return e.value
    finally:
        _driven_synchronously.reset(token)

    coro.close()
    msg = "An awaitable driven synchronously was not ready on its first resumption."
    logg.critical(msg)
    raise SuspensionError(msg, debug={"awaitable": repr(aw), "yielded": repr(yielded)})


def srun(asyn_func, *args, **kwargs) -> object:
    """Invokes an asyn function synchronously, without using keyword 'await'.

    Parameters
    ----------
    asyn_func : function
        an asyn function (declared with 'async def')
    args : list
        postitional arguments to be passed to the function
    kwargs : dict
        other keyword arguments to be passed to the function

    Returns
    -------
    object
        whatever the function returns

    Notes
    -----
    Equivalent to `block_on(asyn_func(*args, **kwargs))`.
    """

    return block_on(asyn_func(*args, **kwargs))
