import asyncio
import threading

from duo.backend import Backend, DualBackend, select_backend

from .guard import MutableGuard, poll_once


__all__ = ["Mutex", "MutexGuard"]


class MutexGuard(MutableGuard):
    """Exclusive access to the value of a :class:`Mutex`."""

    __slots__ = ()

    def _release(self):
        self._lock._inner.release()


class Mutex(DualBackend):
    """A mutual exclusion lock protecting a value.

    The blocking backend is a :class:`threading.Lock`, the aio backend an :class:`asyncio.Lock`.

    >>> from duo.aio import srun
    >>> m = Mutex([])
    >>> with srun(m.lock) as g:
    ...     g.value.append(1)
    >>> m.try_lock().value
    [1]

    Parameters
    ----------
    value : object
        the value to protect
    """

    __slots__ = ("_value",)

    _feature = "aio-sync"

    def __init__(self, value=None):
        backend = select_backend(self._feature)
        inner = asyncio.Lock() if backend is Backend.AIO else threading.Lock()
        self._commit(backend, inner)
        self._value = value

    @classmethod
    def from_blocking(cls, inner, value=None) -> "Mutex":
        obj = super().from_blocking(inner)
        obj._value = value
        return obj

    @classmethod
    def from_aio(cls, inner, value=None) -> "Mutex":
        obj = super().from_aio(inner)
        obj._value = value
        return obj

    async def lock(self) -> MutexGuard:
        """Waits until the lock is acquired and returns a guard."""
        if self._backend is Backend.BLOCKING:
            self._inner.acquire()
        else:
            await self._inner.acquire()
        return MutexGuard(self)

    def try_lock(self):
        """Acquires the lock without waiting.

        Returns
        -------
        MutexGuard or None
            a guard if the lock has been acquired, None if it is held or contended
        """
        if self._backend is Backend.BLOCKING:
            acquired = self._inner.acquire(blocking=False)
        else:
            acquired = not self._inner.locked() and poll_once(self._inner.acquire())
        return MutexGuard(self) if acquired else None

    def locked(self) -> bool:
        """Returns whether the lock is held."""
        return self._inner.locked()

    def into_inner(self):
        """Returns the protected value, ignoring the lock."""
        return self._value
