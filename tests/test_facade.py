import abc
import asyncio
import inspect
import logging
import typing as tp
from typing import Self

import pytest

from duo import features, fs
from duo.aio import SuspensionError, block_on, is_async_context
from duo.facade import (
    FacadeGenerationError,
    FacadePair,
    FacadeTarget,
    dual,
    facades_of,
    generate_facades,
)
from duo.result import Err, Ok, Result
from duo.sync import Mutex


# -----------------------------------------------------------------------------
# implementations
# -----------------------------------------------------------------------------


@dual(sync="SyncFsClient", aio="AioFsClient", feature="aio")
class FsClient:
    """Writes to one file."""

    def __init__(self, path):
        self.path = str(path)
        self.label = "client"

    @classmethod
    def new(cls, path) -> Self:
        return cls(path)

    @classmethod
    def open_existing(cls, path) -> tp.Optional["FsClient"]:
        return None if not srun_exists(path) else cls(path)

    @staticmethod
    async def new_checked(path) -> Result["FsClient", FileNotFoundError]:
        if not await fs.exists(path):
            return Err(FileNotFoundError(path))
        return Ok(FsClient(path))

    async def create(self) -> None:
        f = await fs.File.create(self.path)
        await f.sync_all()
        await f.close()

    async def write(self, buf: bytes) -> Result[int, OSError]:
        try:
            f = await fs.File.open(self.path, "ab")
        except OSError as e:
            return Err(e)
        try:
            return Ok(await f.write(buf))
        finally:
            await f.close()

    async def read(self) -> bytes:
        return await fs.read(self.path)

    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @staticmethod
    def version() -> str:
        return "1.0"

    @staticmethod
    async def report_mode() -> bool:
        return is_async_context()

    @property
    def tag(self) -> str:
        return self.label

    @tag.setter
    def tag(self, value):
        self.label = value


def srun_exists(path):
    return block_on(fs.exists(path))


class Store(abc.ABC):
    @abc.abstractmethod
    async def get(self, key):
        ...

    @abc.abstractmethod
    def size(self) -> int:
        ...


@dual(sync="SyncMemStore", aio="AioMemStore", feature="aio-sync")
class MemStore(Store):
    def __init__(self):
        self.data = {}
        self.mutex = Mutex()

    @classmethod
    def new(cls) -> "MemStore":
        return cls()

    async def get(self, key):
        return self.data.get(key)

    def size(self) -> int:
        return len(self.data)

    async def put(self, key, value):
        async with await self.mutex.lock():
            self.data[key] = value


@tp.runtime_checkable
class Sized(tp.Protocol):
    def size(self) -> int:
        ...


@dual(sync="SyncCounter", aio="AioCounter", feature="aio", interfaces=(Sized,))
class Counter:
    def __init__(self):
        self.n = 0

    @classmethod
    def new(cls) -> Self:
        return cls()

    def size(self) -> int:
        return self.n

    async def incr(self) -> int:
        self.n += 1
        return self.n


# -----------------------------------------------------------------------------
# publishing
# -----------------------------------------------------------------------------


def test_dual_publishes_facades():
    assert isinstance(SyncFsClient, type)
    assert isinstance(AioFsClient, type)
    assert facades_of(FsClient) == FacadePair(SyncFsClient, AioFsClient)
    assert FsClient.__name__ == "FsClient"
    assert SyncFsClient.__name__ == "SyncFsClient"
    assert SyncFsClient.__module__ == FsClient.__module__
    assert SyncFsClient.__doc__ == FsClient.__doc__


def test_facade_preserves_operation_names_and_docs():
    for facade in (SyncFsClient, AioFsClient):
        for name in ("new", "create", "write", "read", "name", "version", "tag"):
            assert hasattr(facade, name)
    assert SyncFsClient.create.__name__ == "create"
    assert not inspect.iscoroutinefunction(SyncFsClient.create)
    assert inspect.iscoroutinefunction(AioFsClient.create)


def test_constructor_signatures_drop_the_class():
    for facade in (SyncFsClient, AioFsClient):
        for name in ("new", "open_existing", "new_checked"):
            params = list(inspect.signature(getattr(facade, name)).parameters)
            assert params == ["path"], (facade, name)
        assert list(inspect.signature(facade.version).parameters) == []


def test_facade_wraps_only_the_implementation():
    with pytest.raises(TypeError):
        SyncFsClient("not a client")


# -----------------------------------------------------------------------------
# scenario 1: plain constructor then a suspending method
# -----------------------------------------------------------------------------


def test_sync_facade_without_event_loop(tmp_path):
    path = tmp_path / "a.txt"
    client = SyncFsClient.new(path)
    assert isinstance(client, SyncFsClient)
    assert client.create() is None
    assert path.exists() and path.read_bytes() == b""


@pytest.mark.asyncio
async def test_aio_facade_inside_event_loop(tmp_path):
    path = tmp_path / "a.txt"
    client = AioFsClient.new(path)
    assert isinstance(client, AioFsClient)
    await client.create()
    assert path.exists()


@pytest.mark.asyncio
async def test_sync_facade_inside_event_loop(tmp_path):
    path = tmp_path / "a.txt"
    SyncFsClient.new(path).create()
    assert path.exists()
    assert SyncFsClient.report_mode() is False
    assert await AioFsClient.report_mode() is True


# -----------------------------------------------------------------------------
# scenario 2: suspending method returning a Result
# -----------------------------------------------------------------------------


def test_sync_facade_returns_result(tmp_path):
    path = tmp_path / "a.txt"
    client = SyncFsClient.new(path)
    assert client.write(b"hello") == Ok(5)
    assert client.read() == b"hello"

    missing = SyncFsClient.new(tmp_path / "no" / "such" / "dir.txt")
    r = missing.write(b"x")
    assert r.is_err() and isinstance(r.err(), FileNotFoundError)


@pytest.mark.asyncio
async def test_aio_facade_returns_result(tmp_path):
    client = AioFsClient.new(tmp_path / "a.txt")
    assert await client.write(b"hi") == Ok(2)
    assert await client.read() == b"hi"


# -----------------------------------------------------------------------------
# constructor shapes
# -----------------------------------------------------------------------------


def test_option_constructor(tmp_path):
    path = tmp_path / "a.txt"
    assert SyncFsClient.open_existing(path) is None
    path.write_bytes(b"")
    client = SyncFsClient.open_existing(path)
    assert isinstance(client, SyncFsClient)


def test_result_constructor(tmp_path):
    path = tmp_path / "a.txt"
    r = SyncFsClient.new_checked(path)
    assert r.is_err() and isinstance(r.err(), FileNotFoundError)

    path.write_bytes(b"")
    r = SyncFsClient.new_checked(path)
    assert r.is_ok() and isinstance(r.unwrap(), SyncFsClient)


@pytest.mark.asyncio
async def test_async_result_constructor_in_aio_facade(tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"")
    r = await AioFsClient.new_checked(path)
    assert isinstance(r.unwrap(), AioFsClient)


# -----------------------------------------------------------------------------
# non-suspending operations
# -----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_non_suspending_operations_agree(tmp_path):
    s = SyncFsClient.new(tmp_path / "a.txt")
    a = AioFsClient.new(tmp_path / "a.txt")
    assert s.name() == a.name() == "a.txt"
    assert SyncFsClient.version() == AioFsClient.version() == "1.0"
    assert s.tag == a.tag == "client"


def test_property_forwarding(tmp_path):
    client = SyncFsClient.new(tmp_path / "a.txt")
    client.tag = "renamed"
    assert client.tag == "renamed"


# -----------------------------------------------------------------------------
# interfaces
# -----------------------------------------------------------------------------


def test_abc_interface_methods_keep_their_shape():
    store = SyncMemStore.new()
    assert isinstance(store, Store)
    store.put("a", 1)  # not part of the interface, driven
    assert store.size() == 1
    assert inspect.iscoroutinefunction(SyncMemStore.get)
    assert block_on(store.get("a")) == 1


@pytest.mark.asyncio
async def test_abc_interface_in_aio_facade():
    store = AioMemStore.new()
    assert isinstance(store, Store)
    await store.put("a", 1)
    assert await store.get("a") == 1


def test_non_suspending_interface_is_forwarded_as_is():
    counter = SyncCounter.new()
    assert isinstance(counter, Sized)
    assert counter.incr() == 1  # not part of the interface, driven
    assert counter.size() == 1


# -----------------------------------------------------------------------------
# scenario 3: resources keep their backend
# -----------------------------------------------------------------------------


def test_blocking_resource_stays_blocking_inside_event_loop():
    store = SyncMemStore.new()
    mutex = store._inner.mutex
    assert mutex.is_blocking()

    async def main():
        guard = await mutex.lock()
        guard.release()
        return mutex.is_blocking()

    assert asyncio.run(main()) is True


def test_driving_an_aio_resource_raises():
    async def main():
        store = AioMemStore.new()
        async with await store._inner.mutex.lock():
            with pytest.raises(SuspensionError):
                block_on(store.put("a", 1))

    asyncio.run(main())


# -----------------------------------------------------------------------------
# gating and generation errors
# -----------------------------------------------------------------------------


class Plain:
    def __init__(self):
        pass

    async def ping(self) -> str:
        return "pong"


def test_aio_facade_absent_when_feature_disabled(caplog):
    with features.override({"aio": False}):
        with caplog.at_level(logging.DEBUG, logger="duobase"):
            pair = generate_facades(Plain, FacadeTarget("SyncPlain", "AioPlain", "aio-time"))
    assert pair.aio is None
    assert pair.sync(Plain()).ping() == "pong"
    assert any("disabled" in r.getMessage() for r in caplog.records)


def test_generation_logs_each_operation(caplog):
    with caplog.at_level(logging.DEBUG, logger="duobase"):
        generate_facades(Plain, FacadeTarget("SyncPlain", "AioPlain", "aio"))
    messages = [r.getMessage() for r in caplog.records]
    assert any("ping" in m for m in messages)


@pytest.mark.parametrize(
    "target",
    [
        FacadeTarget("SyncPlain", "AioPlain", None),
        FacadeTarget("SyncPlain", "AioPlain", "Not A Feature"),
        FacadeTarget("SyncPlain", "AioPlain", "unknown-feature"),
        FacadeTarget("SyncPlain", "SyncPlain", "aio"),
        FacadeTarget("Plain", "AioPlain", "aio"),
        FacadeTarget("not an identifier", "AioPlain", "aio"),
        FacadeTarget(None, "AioPlain", "aio"),
    ],
)
def test_malformed_targets(target):
    with pytest.raises(FacadeGenerationError) as exc_info:
        generate_facades(Plain, target)
    assert "reason" in exc_info.value.debug


def test_implementing_type_must_be_a_class():
    def not_a_class():
        pass

    with pytest.raises(FacadeGenerationError):
        generate_facades(not_a_class, FacadeTarget("SyncX", "AioX", "aio"))


def test_decorator_rejects_ambiguous_constructor():
    with pytest.raises(FacadeGenerationError) as exc_info:

        @dual(sync="SyncOdd", aio="AioOdd", feature="aio")
        class Odd:
            @classmethod
            def make(cls) -> "Odd | int":
                return cls()

    assert exc_info.value.debug["operation"] == "make"
