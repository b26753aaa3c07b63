"""Dual-backend synchronization primitives.

:class:`Mutex`, :class:`RwLock` and :class:`Barrier` pick their backend when constructed, like
every dual-backend resource (see :mod:`duo.backend`). Outside of an event loop they wrap
primitives of :mod:`threading` and can be shared between threads. Inside an event loop they wrap
primitives of :mod:`asyncio` and can be shared between tasks of that loop. The aio backend is
gated by feature 'aio-sync'.

Locks protect a value. Acquiring a lock returns a guard through which the value is accessed.
"""

from .guard import *
from .mutex import *
from .rwlock import *
from .barrier import *

__api__ = [
    "Mutex",
    "MutexGuard",
    "RwLock",
    "RwLockReadGuard",
    "RwLockWriteGuard",
    "AioReadWriteLock",
    "Barrier",
    "BarrierWaitResult",
    "Guard",
    "MutableGuard",
    "ReleasedGuardError",
]
