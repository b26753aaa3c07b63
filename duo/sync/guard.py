"""Guards returned by acquiring a lock of :mod:`duo.sync`."""

from duo.traceback import LogicError


__all__ = ["Guard", "MutableGuard", "ReleasedGuardError", "poll_once"]


class ReleasedGuardError(LogicError):
    """Raised when using a guard after it has been released."""


def poll_once(coro) -> bool:
    """Resumes a coroutine once and tells whether it has completed.

    If it has not, the coroutine is closed. This is how a non-waiting 'try' operation is built
    on top of an asyncio primitive whose acquisition completes without yielding when the
    primitive is free.
    """
    try:
        coro.send(None)
    except StopIteration:
        return True
    coro.close()
    return False


class Guard:
    """Base class of a guard, giving access to the value protected by a lock.

    The lock is held until :meth:`release` is called, or the block of a 'with' or 'async with'
    statement exits.
    """

    __slots__ = ("_lock", "_released")

    def __init__(self, lock):
        self._lock = lock
        self._released = False

    def _check(self):
        if self._released:
            raise ReleasedGuardError(
                "The guard has been released.", debug={"lock": self._lock}
            )

    @property
    def value(self):
        """The protected value."""
        self._check()
        return self._lock._value

    def _release(self):
        raise NotImplementedError

    def release(self):
        """Releases the lock. The guard becomes unusable."""
        self._check()
        self._released = True
        self._release()

    @property
    def released(self) -> bool:
        return self._released

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._released:
            self.release()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self._released:
            self.release()

    def __repr__(self):
        if self._released:
            return "{}(released)".format(type(self).__name__)
        return "{}({!r})".format(type(self).__name__, self._lock._value)


class MutableGuard(Guard):
    """A guard whose protected value can be replaced."""

    __slots__ = ()

    @Guard.value.setter
    def value(self, value):
        self._check()
        self._lock._value = value
