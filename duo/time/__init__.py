"""Dual-backend timing utilities.

Instead of:

.. code-block:: python

   import time

You do:

.. code-block:: python

   from duo import time

It will import the time package plus the additional stuff implemented here: :class:`Instant`, a
monotonic clock reading, and asyn functions :func:`sleep` and :func:`sleep_until`.

In blocking mode, the clock is :func:`time.monotonic` and sleeping blocks the thread. In
asynchronous mode, the clock is the one of the running event loop and sleeping yields control to
the loop. The aio backend is gated by feature 'aio-time'.

Please see Python package `time`_ for more details.

.. _time:
   https://docs.python.org/3/library/time.html
"""

import asyncio
import functools
import math
import time as _t
from time import *

from duo.backend import Backend, DualBackend, dual_function, select_backend


__all__ = ["Instant", "sleep", "sleep_until"]


@functools.total_ordering
class Instant(DualBackend):
    """A measurement of a monotonically nondecreasing clock.

    Opaque and useful only in comparison with another instant or as a deadline. Durations are
    floats in seconds. Arithmetic keeps the backend, and therefore the clock, of the left-hand
    instant.

    >>> start = Instant.now()
    >>> start.elapsed() >= 0.0
    True
    """

    __slots__ = ("_clock",)

    _feature = "aio-time"

    @classmethod
    def _make(cls, backend: Backend, value: float, clock):
        obj = cls._wrap(backend, float(value))
        obj._clock = clock
        return obj

    @classmethod
    def now(cls) -> "Instant":
        """Returns an instant corresponding to 'now'."""
        if select_backend(cls._feature) is Backend.AIO:
            loop = asyncio.get_running_loop()
            return cls._make(Backend.AIO, loop.time(), loop.time)
        return cls._make(Backend.BLOCKING, _t.monotonic(), _t.monotonic)

    @classmethod
    def from_blocking(cls, value: float) -> "Instant":
        """Wraps a reading of :func:`time.monotonic`."""
        return cls._make(Backend.BLOCKING, value, _t.monotonic)

    @classmethod
    def from_aio(cls, value: float, loop=None) -> "Instant":
        """Wraps a reading of the clock of an event loop, by default the running one."""
        obj = super().from_aio(float(value))
        obj._clock = (loop or asyncio.get_running_loop()).time
        return obj

    def elapsed(self) -> float:
        """Returns the number of seconds elapsed since this instant, using its own clock."""
        return self._clock() - self._inner

    def duration_since(self, earlier: "Instant") -> float:
        """Returns the number of seconds from another instant to this one, or zero if negative."""
        return max(self._inner - earlier._inner, 0.0)

    def checked_add(self, secs: float):
        """Returns the instant `secs` seconds later, or None if it cannot be represented."""
        value = self._inner + secs
        if not math.isfinite(value):
            return None
        return self._make(self._backend, value, self._clock)

    def checked_sub(self, secs: float):
        """Returns the instant `secs` seconds earlier, or None if it cannot be represented."""
        return self.checked_add(-secs)

    def __add__(self, secs):
        if not isinstance(secs, (int, float)):
            return NotImplemented
        retval = self.checked_add(secs)
        if retval is None:
            raise OverflowError("Instant overflow when adding {} seconds.".format(secs))
        return retval

    def __sub__(self, other):
        if isinstance(other, Instant):
            return self._inner - other._inner
        if not isinstance(other, (int, float)):
            return NotImplemented
        return self + (-other)

    def __eq__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self._inner == other._inner

    def __lt__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self._inner < other._inner

    def __hash__(self):
        return hash(self._inner)


sleep = dual_function(
    _t.sleep,
    asyncio.sleep,
    feature="aio-time",
    name="sleep",
    doc="""An asyn function that sleeps for a number of seconds.

    In asynchronous mode, it invokes :func:`asyncio.sleep`. In synchronous mode, it invokes
    :func:`time.sleep`.

    Parameters
    ----------
    secs : float
        number of seconds to sleep
    """,
)


async def sleep_until(deadline: Instant):
    """An asyn function that sleeps until a deadline is reached.

    The remaining time is measured with the clock of the deadline. Returns immediately if the
    deadline has passed.

    Parameters
    ----------
    deadline : Instant
        the instant to wake up at
    """
    await sleep(max(-deadline.elapsed(), 0.0))
