import asyncio
import threading

from duo.backend import Backend, DualBackend, select_backend


__all__ = ["Barrier", "BarrierWaitResult"]


class BarrierWaitResult:
    """What :meth:`Barrier.wait` returns. Exactly one waiter of each generation is the leader."""

    __slots__ = ("_is_leader",)

    def __init__(self, is_leader: bool):
        self._is_leader = is_leader

    def is_leader(self) -> bool:
        return self._is_leader

    def __repr__(self):
        return "BarrierWaitResult(is_leader={})".format(self._is_leader)


class Barrier(DualBackend):
    """A barrier letting a number of threads or tasks wait until all of them have reached it.

    The blocking backend is a :class:`threading.Barrier`, the aio backend an
    :class:`asyncio.Barrier`. The barrier is reusable. Once `parties` waiters have arrived, they
    are all released and the next generation starts.

    Parameters
    ----------
    parties : int
        number of waiters to wait for, at least 1
    """

    __slots__ = ()

    _feature = "aio-sync"

    def __init__(self, parties: int):
        if parties < 1:
            raise ValueError("A barrier needs at least 1 party, given {}.".format(parties))
        backend = select_backend(self._feature)
        if backend is Backend.AIO:
            inner = asyncio.Barrier(parties)
        else:
            inner = threading.Barrier(parties)
        self._commit(backend, inner)

    async def wait(self) -> BarrierWaitResult:
        """Waits until all parties have reached the barrier."""
        if self._backend is Backend.BLOCKING:
            index = self._inner.wait()
        else:
            index = await self._inner.wait()
        return BarrierWaitResult(index == 0)

    @property
    def parties(self) -> int:
        return self._inner.parties

    @property
    def n_waiting(self) -> int:
        """Number of waiters currently waiting at the barrier."""
        return self._inner.n_waiting
