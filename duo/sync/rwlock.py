import asyncio
import collections

from duo.backend import Backend, DualBackend, select_backend
from duo.threading import ReadWriteLock

from .guard import Guard, MutableGuard


__all__ = ["AioReadWriteLock", "RwLock", "RwLockReadGuard", "RwLockWriteGuard"]


class AioReadWriteLock:
    """An asyncio counterpart of :class:`duo.threading.ReadWriteLock`.

    Many tasks can hold a read lock at the same time, but only one task can hold the write lock.
    Waiting tasks are served in arrival order, so a waiting writer blocks every new reader.
    Releasing never waits.
    """

    def __init__(self):
        self._readers = 0
        self._writer = False
        self._waiters = collections.deque()  # of (is_writer, future)

    def __repr__(self):
        return "{}(readers={}, writer={}, waiters={})".format(
            type(self).__name__, self._readers, self._writer, len(self._waiters)
        )

    def try_acquire_read(self) -> bool:
        """Acquires a read lock if no task holds or waits for a lock. Returns whether it does."""
        if self._writer or self._waiters:
            return False
        self._readers += 1
        return True

    def try_acquire_write(self) -> bool:
        """Acquires the write lock if no task holds or waits for a lock. Returns whether it does."""
        if self._writer or self._readers or self._waiters:
            return False
        self._writer = True
        return True

    async def acquire_read(self):
        """Acquires a read lock, waiting while a writer holds or waits for the lock."""
        if not self.try_acquire_read():
            await self._wait(False)

    async def acquire_write(self):
        """Acquires the write lock, waiting until every other lock has been released."""
        if not self.try_acquire_write():
            await self._wait(True)

    def release_read(self):
        """Releases a read lock."""
        if self._readers <= 0:
            raise RuntimeError("Read lock released more times than acquired.")
        self._readers -= 1
        self._wake()

    def release_write(self):
        """Releases the write lock."""
        if not self._writer:
            raise RuntimeError("Write lock released while not acquired.")
        self._writer = False
        self._wake()

    def is_free(self) -> bool:
        """Returns whether there is no reader and no writer."""
        return not self._readers and not self._writer

    async def _wait(self, is_writer: bool):
        fut = asyncio.get_running_loop().create_future()
        entry = (is_writer, fut)
        self._waiters.append(entry)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.cancelled():
                try:
                    self._waiters.remove(entry)
                except ValueError:
                    pass
                self._wake()
            elif is_writer:  # granted just before the cancellation
                self.release_write()
            else:
                self.release_read()
            raise

    def _wake(self):
        # grants are made here, in arrival order
        while self._waiters:
            is_writer, fut = self._waiters[0]
            if fut.done():
                self._waiters.popleft()
                continue
            if is_writer:
                if self._writer or self._readers:
                    return
                self._waiters.popleft()
                self._writer = True
                fut.set_result(True)
                return
            if self._writer:
                return
            self._waiters.popleft()
            self._readers += 1
            fut.set_result(True)


class RwLockReadGuard(Guard):
    """Shared access to the value of a :class:`RwLock`."""

    __slots__ = ()

    def _release(self):
        self._lock._inner.release_read()


class RwLockWriteGuard(MutableGuard):
    """Exclusive access to the value of a :class:`RwLock`."""

    __slots__ = ()

    def _release(self):
        self._lock._inner.release_write()


class RwLock(DualBackend):
    """A reader-writer lock protecting a value.

    Any number of readers or one writer can hold the lock at a time. Writers are preferred over
    new readers. The blocking backend is a :class:`duo.threading.ReadWriteLock`, whose write lock
    must be released by the thread that acquired it. The aio backend is an
    :class:`AioReadWriteLock`.

    Parameters
    ----------
    value : object
        the value to protect
    """

    __slots__ = ("_value",)

    _feature = "aio-sync"

    def __init__(self, value=None):
        backend = select_backend(self._feature)
        inner = AioReadWriteLock() if backend is Backend.AIO else ReadWriteLock()
        self._commit(backend, inner)
        self._value = value

    @classmethod
    def from_blocking(cls, inner, value=None) -> "RwLock":
        obj = super().from_blocking(inner)
        obj._value = value
        return obj

    @classmethod
    def from_aio(cls, inner, value=None) -> "RwLock":
        obj = super().from_aio(inner)
        obj._value = value
        return obj

    async def read(self) -> RwLockReadGuard:
        """Waits until a read lock is acquired and returns a read guard."""
        if self._backend is Backend.BLOCKING:
            self._inner.acquire_read()
        else:
            await self._inner.acquire_read()
        return RwLockReadGuard(self)

    async def write(self) -> RwLockWriteGuard:
        """Waits until the write lock is acquired and returns a write guard."""
        if self._backend is Backend.BLOCKING:
            self._inner.acquire_write()
        else:
            await self._inner.acquire_write()
        return RwLockWriteGuard(self)

    def try_read(self):
        """Returns a read guard if a read lock can be acquired without waiting, else None."""
        return RwLockReadGuard(self) if self._inner.try_acquire_read() else None

    def try_write(self):
        """Returns a write guard if the write lock can be acquired without waiting, else None."""
        return RwLockWriteGuard(self) if self._inner.try_acquire_write() else None

    def into_inner(self):
        """Returns the protected value, ignoring the lock."""
        return self._value
