"""Buffered readers and writers over any asyn reader or writer."""

import typing as tp


__all__ = ["DEFAULT_BUF_SIZE", "BufReader", "BufWriter", "Lines", "Split"]


DEFAULT_BUF_SIZE = 8192


def _delimiter(delim) -> bytes:
    if isinstance(delim, int):
        return bytes([delim])
    if not isinstance(delim, bytes) or len(delim) != 1:
        raise ValueError("A delimiter must be a single byte, got {!r}.".format(delim))
    return delim


def _check_capacity(capacity: int):
    if capacity < 1:
        raise ValueError("Capacity must be positive, got {}.".format(capacity))


class BufReader:
    """Adds buffering to a reader.

    Reading directly from a reader like a :class:`duo.net.TcpStream` costs one system call per
    read. A BufReader instead reads large chunks into an in-memory buffer and serves small reads
    from there.

    The reader is any object with an asyn method `read(size)` returning bytes, and an empty bytes
    object at EOF. The BufReader does not own a backend. Its asyn methods wait exactly when the
    reader waits, so a BufReader over a blocking resource can be driven with
    :func:`duo.aio.srun` even inside an event loop.

    Parameters
    ----------
    inner : object
        the reader
    capacity : int
        size of the internal buffer in bytes

    >>> from duo import io
    >>> from duo.aio import srun
    >>> srun(io.BufReader(io.repeat(ord("a"))).read, 3)
    b'aaa'
    """

    __slots__ = ("_inner", "_capacity", "_buf", "_pos")

    def __init__(self, inner, capacity: int = DEFAULT_BUF_SIZE):
        _check_capacity(capacity)
        self._inner = inner
        self._capacity = capacity
        self._buf = b""
        self._pos = 0

    @property
    def capacity(self) -> int:
        """Number of bytes the internal buffer can hold."""
        return self._capacity

    def buffer(self) -> bytes:
        """Returns the bytes buffered but not consumed yet."""
        return self._buf[self._pos :]

    def get_ref(self):
        """Returns the reader."""
        return self._inner

    def into_inner(self):
        """Returns the reader. Buffered bytes are lost."""
        return self._inner

    async def fill_buf(self) -> bytes:
        """Returns the buffered bytes, reading a chunk from the reader first if there are none.

        An empty result means EOF.
        """
        if self._pos >= len(self._buf):
            self._buf = await self._inner.read(self._capacity)
            self._pos = 0
        return self._buf[self._pos :]

    def consume(self, amount: int):
        """Marks `amount` buffered bytes as consumed, so that they are not returned again."""
        self._pos = min(self._pos + amount, len(self._buf))

    async def read(self, size: int = -1) -> bytes:
        """Reads at most `size` bytes, or until EOF if `size` is -1."""
        if size is None or size < 0:
            chunks = [self.buffer()]
            self._buf, self._pos = b"", 0
            while True:
                chunk = await self._inner.read(self._capacity)
                if not chunk:
                    return b"".join(chunks)
                chunks.append(chunk)

        if self._pos >= len(self._buf) and size >= self._capacity:
            return await self._inner.read(size)  # nothing to gain from buffering

        data = (await self.fill_buf())[:size]
        self.consume(len(data))
        return data

    async def read_until(self, delim) -> bytes:
        """Reads until the delimiter byte, included, or until EOF.

        Parameters
        ----------
        delim : int or bytes
            the delimiter, as an int or as a bytes object of length 1

        Returns
        -------
        bytes
            the bytes read, ending with the delimiter unless EOF was reached. Empty at EOF.
        """
        delim = _delimiter(delim)
        chunks = []
        while True:
            available = await self.fill_buf()
            if not available:
                break
            i = available.find(delim)
            if i >= 0:
                chunks.append(available[: i + 1])
                self.consume(i + 1)
                break
            chunks.append(available)
            self.consume(len(available))
        return b"".join(chunks)

    async def skip_until(self, delim) -> int:
        """Like :meth:`read_until` but discards the bytes. Returns how many were skipped."""
        delim = _delimiter(delim)
        skipped = 0
        while True:
            available = await self.fill_buf()
            if not available:
                return skipped
            i = available.find(delim)
            used = len(available) if i < 0 else i + 1
            self.consume(used)
            skipped += used
            if i >= 0:
                return skipped

    async def read_line(self) -> str:
        """Reads a line, including its newline, decoded as UTF-8. Returns '' at EOF."""
        return (await self.read_until(b"\n")).decode("utf-8")

    def lines(self) -> "Lines":
        """Returns an asynchronous iterator over the lines, without their line terminators."""
        return Lines(self)

    def split(self, delim) -> "Split":
        """Returns an asynchronous iterator over the chunks separated by a delimiter byte."""
        return Split(self, _delimiter(delim))

    def __repr__(self):
        return "BufReader({!r}, capacity={})".format(self._inner, self._capacity)


class Lines:
    """Iterator over the lines of a :class:`BufReader`.

    Use `async for` inside an event loop. Outside of one, drive :meth:`next` with
    :func:`duo.aio.srun` until it returns None.
    """

    __slots__ = ("_reader",)

    def __init__(self, reader: BufReader):
        self._reader = reader

    async def next(self) -> tp.Optional[str]:
        """Returns the next line without its '\\n' or '\\r\\n' terminator, or None at EOF."""
        line = await self._reader.read_line()
        if not line:
            return None
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        line = await self.next()
        if line is None:
            raise StopAsyncIteration
        return line


class Split:
    """Iterator over the chunks of a :class:`BufReader` separated by a delimiter byte.

    Used like :class:`Lines`.
    """

    __slots__ = ("_reader", "_delim")

    def __init__(self, reader: BufReader, delim: bytes):
        self._reader = reader
        self._delim = delim

    async def next(self) -> tp.Optional[bytes]:
        """Returns the next chunk without its delimiter, or None at EOF."""
        chunk = await self._reader.read_until(self._delim)
        if not chunk:
            return None
        if chunk.endswith(self._delim):
            chunk = chunk[:-1]
        return chunk

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.next()
        if chunk is None:
            raise StopAsyncIteration
        return chunk


class BufWriter:
    """Adds buffering to a writer.

    Small writes are collected in an in-memory buffer and handed over to the writer in large
    chunks. Call :meth:`flush` once done, or use the BufWriter as an asynchronous context manager.

    The writer is any object with an asyn method `write(data)` writing all of the data. If it
    also has an asyn method `flush()`, :meth:`flush` invokes it. Like :class:`BufReader`, a
    BufWriter does not own a backend.

    Parameters
    ----------
    inner : object
        the writer
    capacity : int
        size of the internal buffer in bytes
    """

    __slots__ = ("_inner", "_capacity", "_buf")

    def __init__(self, inner, capacity: int = DEFAULT_BUF_SIZE):
        _check_capacity(capacity)
        self._inner = inner
        self._capacity = capacity
        self._buf = bytearray()

    @property
    def capacity(self) -> int:
        """Number of bytes the internal buffer can hold."""
        return self._capacity

    def buffer(self) -> bytes:
        """Returns the bytes written but not handed over to the writer yet."""
        return bytes(self._buf)

    def get_ref(self):
        """Returns the writer."""
        return self._inner

    async def write(self, data) -> int:
        """Writes bytes, or a str encoded in UTF-8. Returns the number of bytes written."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if len(self._buf) + len(data) > self._capacity:
            await self._flush_buf()
        if len(data) >= self._capacity:
            await self._inner.write(data)
        else:
            self._buf += data
        return len(data)

    async def _flush_buf(self):
        if self._buf:
            await self._inner.write(bytes(self._buf))
            self._buf.clear()

    async def flush(self):
        """Hands the buffered bytes over to the writer, then flushes the writer."""
        await self._flush_buf()
        flush = getattr(self._inner, "flush", None)
        if flush is not None:
            await flush()

    async def into_inner(self):
        """Flushes the buffered bytes and returns the writer."""
        await self._flush_buf()
        return self._inner

    def into_parts(self) -> tp.Tuple[object, bytes]:
        """Returns the writer and the buffered bytes, without flushing anything."""
        data = bytes(self._buf)
        self._buf.clear()
        return self._inner, data

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.flush()

    def __repr__(self):
        return "BufWriter({!r}, capacity={})".format(self._inner, self._capacity)
