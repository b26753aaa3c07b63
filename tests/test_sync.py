import asyncio
import threading
import time

import pytest

from duo import features
from duo.aio import srun
from duo.sync import (
    AioReadWriteLock,
    Barrier,
    Mutex,
    ReleasedGuardError,
    RwLock,
)
from duo.threading import ReadWriteLock


# -----------------------------------------------------------------------------
# Mutex
# -----------------------------------------------------------------------------


def test_blocking_mutex_between_threads():
    mutex = Mutex(0)
    assert mutex.is_blocking()

    def work():
        for _ in range(200):
            with srun(mutex.lock) as guard:
                guard.value += 1

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert mutex.into_inner() == 800
    assert not mutex.locked()


def test_blocking_try_lock():
    mutex = Mutex([])
    guard = mutex.try_lock()
    assert guard is not None and mutex.locked()
    assert mutex.try_lock() is None
    guard.value.append(1)
    guard.release()
    assert not mutex.locked()
    assert mutex.try_lock().value == [1]


def test_released_guard_is_unusable():
    mutex = Mutex(1)
    guard = srun(mutex.lock)
    guard.release()
    assert guard.released
    with pytest.raises(ReleasedGuardError):
        guard.value
    with pytest.raises(ReleasedGuardError):
        guard.release()


@pytest.mark.asyncio
async def test_aio_mutex_between_tasks():
    mutex = Mutex(0)
    assert mutex.is_aio()

    async def work():
        for _ in range(50):
            async with await mutex.lock() as guard:
                value = guard.value
                await asyncio.sleep(0)
                guard.value = value + 1

    await asyncio.gather(*(work() for _ in range(4)))
    assert mutex.into_inner() == 200


@pytest.mark.asyncio
async def test_aio_try_lock():
    mutex = Mutex("x")
    guard = await mutex.lock()
    assert mutex.try_lock() is None

    waiter = asyncio.create_task(mutex.lock())
    await asyncio.sleep(0)
    guard.release()
    assert mutex.try_lock() is None  # handed over to the waiting task

    guard = await waiter
    guard.release()
    guard = mutex.try_lock()
    assert guard is not None and guard.value == "x"
    guard.release()


@pytest.mark.asyncio
async def test_mutex_gated_by_feature():
    with features.override({"aio-sync": False}):
        mutex = Mutex()
    assert mutex.is_blocking()


# -----------------------------------------------------------------------------
# RwLock
# -----------------------------------------------------------------------------


def test_blocking_rwlock():
    lock = RwLock({"a": 1})
    r1 = srun(lock.read)
    r2 = lock.try_read()
    assert r2 is not None
    assert r1.value == r2.value == {"a": 1}
    assert lock.try_write() is None

    r1.release()
    r2.release()
    with srun(lock.write) as w:
        w.value = {"a": 2}
        assert lock.try_read() is None
    assert lock.try_read().value == {"a": 2}


def test_blocking_write_guard_is_exclusive_on_the_owning_thread():
    lock = RwLock(0)
    guard = srun(lock.write)
    assert lock.try_write() is None
    assert lock.try_read() is None
    with pytest.raises(RuntimeError):
        srun(lock.write)
    guard.release()

    guard = lock.try_write()
    assert guard is not None
    guard.release()
    assert lock.unwrap_blocking().is_free()


def test_blocking_write_lock_released_by_owner_only():
    lock = ReadWriteLock()
    lock.acquire_write()
    errors = []

    def release():
        try:
            lock.release_write()
        except RuntimeError as e:
            errors.append(e)

    t = threading.Thread(target=release)
    t.start()
    t.join()
    assert len(errors) == 1
    lock.release_write()
    assert lock.is_free()


def test_read_guard_is_read_only():
    lock = RwLock(1)
    with srun(lock.read) as guard:
        with pytest.raises(AttributeError):
            guard.value = 2


def test_blocking_writer_preference():
    lock = ReadWriteLock()
    lock.acquire_read()
    acquired = threading.Event()

    def writer():
        lock.acquire_write()
        acquired.set()
        lock.release_write()

    t = threading.Thread(target=writer)
    t.start()
    while lock._writers == 0:  # wait for the writer to queue
        time.sleep(0.001)

    assert not lock.try_acquire_read()
    assert not acquired.is_set()
    lock.release_read()
    t.join()
    assert acquired.is_set()
    assert lock.is_free()


@pytest.mark.asyncio
async def test_aio_rwlock_writer_preference():
    lock = RwLock([])
    assert lock.is_aio()
    order = []

    reader = await lock.read()

    async def write():
        async with await lock.write() as w:
            order.append("write")
            w.value.append(1)

    async def read():
        async with await lock.read() as r:
            order.append("read {}".format(len(r.value)))

    writer_task = asyncio.create_task(write())
    await asyncio.sleep(0)
    reader_task = asyncio.create_task(read())
    await asyncio.sleep(0)

    assert lock.try_read() is None  # a writer is waiting
    assert order == []
    reader.release()
    await asyncio.gather(writer_task, reader_task)
    assert order == ["write", "read 1"]


@pytest.mark.asyncio
async def test_aio_rwlock_cancelled_writer_lets_readers_in():
    lock = AioReadWriteLock()
    await lock.acquire_read()
    writer = asyncio.create_task(lock.acquire_write())
    await asyncio.sleep(0)
    assert not lock.try_acquire_read()

    writer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await writer
    assert lock.try_acquire_read()
    lock.release_read()
    lock.release_read()
    assert lock.is_free()


def test_aio_rwlock_release_errors():
    lock = AioReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


# -----------------------------------------------------------------------------
# Barrier
# -----------------------------------------------------------------------------


def test_blocking_barrier():
    barrier = Barrier(3)
    assert barrier.is_blocking() and barrier.parties == 3
    results = []

    def work():
        results.append(srun(barrier.wait))

    threads = [threading.Thread(target=work) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 3
    assert sum(r.is_leader() for r in results) == 1


@pytest.mark.asyncio
async def test_aio_barrier():
    barrier = Barrier(3)
    assert barrier.is_aio()
    results = await asyncio.gather(*(barrier.wait() for _ in range(3)))
    assert sum(r.is_leader() for r in results) == 1
    assert barrier.n_waiting == 0


def test_barrier_needs_a_party():
    with pytest.raises(ValueError):
        Barrier(0)
