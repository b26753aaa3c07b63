"""Readers and writers that never wait.

They own no backend. Their asyn methods complete without yielding, so they can be awaited inside
an event loop or driven with :func:`duo.aio.srun` outside of one.
"""

__all__ = ["Empty", "Repeat", "Sink", "empty", "repeat", "sink"]


class Empty:
    """A reader that is always at EOF, and a writer that discards everything."""

    __slots__ = ()

    async def read(self, size: int = -1) -> bytes:
        return b""

    async def write(self, data) -> int:
        return len(data)

    async def flush(self):
        pass

    async def seek(self, offset: int, whence: int = 0) -> int:
        return 0

    def __repr__(self):
        return "Empty()"


class Repeat:
    """An infinite reader yielding one byte over and over again.

    Parameters
    ----------
    byte : int
        the byte to repeat, between 0 and 255
    """

    __slots__ = ("_byte",)

    def __init__(self, byte: int):
        self._byte = bytes([byte])

    async def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            raise ValueError("An infinite reader cannot be read until EOF.")
        return self._byte * size

    def __repr__(self):
        return "Repeat({})".format(self._byte[0])


class Sink:
    """A writer that discards everything."""

    __slots__ = ()

    async def write(self, data) -> int:
        return len(data)

    async def flush(self):
        pass

    def __repr__(self):
        return "Sink()"


def empty() -> Empty:
    return Empty()


def repeat(byte: int) -> Repeat:
    return Repeat(byte)


def sink() -> Sink:
    return Sink()
