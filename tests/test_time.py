import asyncio
import math

import pytest

from duo import features, time
from duo.aio import srun
from duo.time import Instant


def test_blocking_instant():
    start = Instant.now()
    assert start.is_blocking()
    assert start.elapsed() >= 0.0
    later = Instant.now()
    assert later >= start
    assert later.duration_since(start) >= 0.0
    assert start.duration_since(later) == 0.0


def test_instant_arithmetic():
    start = Instant.from_blocking(100.0)
    later = start + 2.5
    assert later.is_blocking()
    assert later - start == 2.5
    assert later - 2.5 == start
    assert start < later and later > start
    assert hash(later - 2.5) == hash(start)
    assert start.checked_sub(1.0) == Instant.from_blocking(99.0)


def test_instant_overflow():
    start = Instant.from_blocking(0.0)
    assert start.checked_add(math.inf) is None
    with pytest.raises(OverflowError):
        start + math.inf


def test_instant_rejects_other_operands():
    start = Instant.from_blocking(0.0)
    with pytest.raises(TypeError):
        start + "1"
    with pytest.raises(TypeError):
        start < 1.0


def test_blocking_sleep():
    start = Instant.now()
    srun(time.sleep, 0.01)
    assert start.elapsed() >= 0.009


def test_sleep_until_past_deadline():
    deadline = Instant.now() - 1.0
    srun(time.sleep_until, deadline)
    assert deadline.elapsed() >= 1.0


def test_stdlib_time_is_reexported():
    assert callable(time.monotonic)
    assert callable(time.perf_counter)


@pytest.mark.asyncio
async def test_aio_instant_uses_loop_clock():
    loop = asyncio.get_running_loop()
    start = Instant.now()
    assert start.is_aio()
    assert start.unwrap_aio() <= loop.time()
    await time.sleep(0.01)
    assert start.elapsed() >= 0.009


@pytest.mark.asyncio
async def test_aio_sleep_until():
    deadline = Instant.now() + 0.02
    await time.sleep_until(deadline)
    assert deadline.elapsed() >= -0.001


@pytest.mark.asyncio
async def test_aio_sleep_yields_to_other_tasks():
    seen = []

    async def other():
        seen.append(1)

    task = asyncio.create_task(other())
    await time.sleep(0)
    assert seen == [1]
    await task


@pytest.mark.asyncio
async def test_aio_time_gated_by_feature():
    with features.override({"aio-time": False}):
        assert Instant.now().is_blocking()
