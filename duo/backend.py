"""The dual-backend resource pattern.

Every resource of duobase (files, sockets, locks, clock readings, ...) wraps exactly one of two
backend implementations:

- the blocking backend, whose operations run to completion on the calling thread;
- the aio backend, whose waiting operations are coroutines yielding control to the running
  event loop.

The backend is selected once, when the resource is constructed, by asking
:func:`duo.aio.is_async_context` whether an event loop is running. It never changes afterwards.
A resource constructed outside an event loop keeps blocking even if it is later used from inside
one, and vice versa.

Operations of a resource are declared with 'async def' whenever the aio backend may wait. On a
blocking resource they never yield, so they can be awaited as usual or driven with
:func:`duo.aio.block_on`.

Concurrent use of one resource from several threads or tasks must be guarded externally, for
example with a :class:`duo.sync.Mutex`, which is itself a dual-backend resource.
"""

import enum
import typing as tp

from duo import features
from duo.aio import is_async_context
from duo.traceback import LogicError


__all__ = [
    "Backend",
    "FeatureDisabledError",
    "select_backend",
    "DualBackend",
    "dual_method",
    "dual_method_sync",
    "dual_function",
]


class Backend(enum.Enum):
    """Which of the two backends a resource has committed to."""

    BLOCKING = "blocking"
    AIO = "aio"


class FeatureDisabledError(LogicError):
    """Raised when wrapping an aio backend whose feature is disabled."""


def select_backend(feature: str = "aio") -> Backend:
    """Selects the backend for a resource about to be constructed.

    The execution-mode oracle is consulted exactly once.

    Parameters
    ----------
    feature : str
        the feature gating the aio backend of the resource family

    Returns
    -------
    Backend
        AIO if the feature is enabled and an event loop is running, BLOCKING otherwise
    """
    if features.enabled(feature) and is_async_context():
        return Backend.AIO
    return Backend.BLOCKING


class DualBackend:
    """Base class of every dual-backend resource.

    An instance holds a backend tag and the backend object it exclusively owns. Both are set
    once and cannot be rebound.

    Subclasses set class attribute `_feature` to the feature gating their aio backend, and
    construct instances via :meth:`_wrap`, :meth:`from_blocking` or :meth:`from_aio`.
    """

    __slots__ = ("_backend", "_inner")

    _feature = "aio"

    @classmethod
    def _wrap(cls, backend: Backend, inner):
        obj = cls.__new__(cls)
        obj._commit(backend, inner)
        return obj

    def _commit(self, backend: Backend, inner):
        if hasattr(self, "_backend"):
            raise AttributeError(
                "The backend of {} cannot be changed.".format(type(self).__name__)
            )
        object.__setattr__(self, "_backend", backend)
        object.__setattr__(self, "_inner", inner)

    def __setattr__(self, name, value):
        if name in DualBackend.__slots__:
            raise AttributeError(
                "The backend of {} cannot be changed.".format(type(self).__name__)
            )
        object.__setattr__(self, name, value)

    @classmethod
    def from_blocking(cls, inner):
        """Wraps an object of the blocking backend."""
        return cls._wrap(Backend.BLOCKING, inner)

    @classmethod
    def from_aio(cls, inner):
        """Wraps an object of the aio backend.

        Raises
        ------
        FeatureDisabledError
            if the feature gating the aio backend is disabled
        """
        if not features.enabled(cls._feature):
            raise FeatureDisabledError(
                "Cannot wrap an aio backend while its feature is disabled.",
                debug={"type": cls.__name__, "feature": cls._feature},
            )
        return cls._wrap(Backend.AIO, inner)

    @property
    def backend(self) -> Backend:
        """The backend the resource has committed to."""
        return self._backend

    def is_blocking(self) -> bool:
        return self._backend is Backend.BLOCKING

    def is_aio(self) -> bool:
        return self._backend is Backend.AIO

    # ----- unwrapping -----

    def unwrap_blocking(self):
        """Returns the underlying blocking object, raising LogicError if there is none."""
        if self._backend is not Backend.BLOCKING:
            raise LogicError(
                "Called unwrap_blocking() on an aio resource.",
                debug={"type": type(self).__name__},
            )
        return self._inner

    def unwrap_aio(self):
        """Returns the underlying aio object, raising LogicError if there is none."""
        if self._backend is not Backend.AIO:
            raise LogicError(
                "Called unwrap_aio() on a blocking resource.",
                debug={"type": type(self).__name__},
            )
        return self._inner

    def get_blocking(self):
        """Returns the underlying blocking object, or None."""
        return self._inner if self._backend is Backend.BLOCKING else None

    def get_aio(self):
        """Returns the underlying aio object, or None."""
        return self._inner if self._backend is Backend.AIO else None

    def __repr__(self):
        return "{}({}, {!r})".format(
            type(self).__name__, self._backend.value, self._inner
        )


# -----------------------------------------------------------------------------
# dispatch helpers
# -----------------------------------------------------------------------------


def dual_method(name: str, doc: tp.Optional[str] = None):
    """Makes a method forwarding to a waiting operation of the backend object.

    The operation has the same name in both backends. Its result is awaited only in the aio
    backend.

    Parameters
    ----------
    name : str
        name of the operation
    doc : str, optional
        docstring of the method
    """

    async def method(self, *args, **kwargs):
        func = getattr(self._inner, name)
        if self._backend is Backend.BLOCKING:
            return func(*args, **kwargs)
        return await func(*args, **kwargs)

    method.__name__ = name
    method.__qualname__ = name
    method.__doc__ = doc
    return method


def dual_method_sync(name: str, doc: tp.Optional[str] = None):
    """Makes a method forwarding to a non-waiting operation of the backend object."""

    def method(self, *args, **kwargs):
        return getattr(self._inner, name)(*args, **kwargs)

    method.__name__ = name
    method.__qualname__ = name
    method.__doc__ = doc
    return method


def dual_function(
    blocking_func,
    aio_func,
    feature: str = "aio",
    name: tp.Optional[str] = None,
    doc: tp.Optional[str] = None,
):
    """Makes an asyn function invoking either a blocking function or an aio function.

    The backend is selected via :func:`select_backend` on each invocation.

    Parameters
    ----------
    blocking_func : callable
        the blocking function
    aio_func : callable
        the coroutine function with the same parameters
    feature : str
        the feature gating `aio_func`
    name : str, optional
        name of the resulting function. Default is the name of `blocking_func`.
    doc : str, optional
        docstring of the resulting function. Default is the docstring of `blocking_func`.
    """

    async def func(*args, **kwargs):
        if select_backend(feature) is Backend.AIO:
            return await aio_func(*args, **kwargs)
        return blocking_func(*args, **kwargs)

    func.__name__ = func.__qualname__ = name or blocking_func.__name__
    func.__doc__ = doc if doc is not None else blocking_func.__doc__
    return func
