import asyncio
import socket

from duo.backend import Backend, select_backend

from .base import SocketResource, resolve


__all__ = ["TcpListener", "TcpStream"]


class TcpStream(SocketResource):
    """A TCP connection between a local and a remote socket.

    >>> from duo.aio import srun
    >>> stream = srun(TcpStream.connect, ("example.com", 80))  # doctest: +SKIP
    >>> srun(stream.write, b"HEAD / HTTP/1.0\\r\\n\\r\\n")  # doctest: +SKIP
    19
    """

    __slots__ = ()

    @classmethod
    async def connect(cls, address) -> "TcpStream":
        """Opens a TCP connection to a remote host.

        Each resolved address is tried in turn until one connects.

        Parameters
        ----------
        address : tuple
            a (host, port) pair

        Raises
        ------
        OSError
            the error of the last attempt if no address connects
        """
        backend = select_backend(cls._feature)
        if backend is Backend.BLOCKING:
            return cls._make(backend, socket.create_connection(address))

        loop = asyncio.get_running_loop()
        error = None
        for family, sockaddr in await resolve(address, socket.SOCK_STREAM, backend):
            sock = socket.socket(family, socket.SOCK_STREAM)
            sock.setblocking(False)
            try:
                await loop.sock_connect(sock, sockaddr)
            except OSError as e:
                sock.close()
                error = e
                continue
            except BaseException:
                sock.close()
                raise
            return cls._make(backend, sock)
        raise error

    async def read(self, n: int = 65536) -> bytes:
        """Receives at most `n` bytes. Returns an empty bytes object once the peer has closed."""
        if self._backend is Backend.BLOCKING:
            return self._inner.recv(n)
        return await asyncio.get_running_loop().sock_recv(self._inner, n)

    async def write(self, data: bytes) -> int:
        """Sends all of `data`, returning the number of bytes sent."""
        if self._backend is Backend.BLOCKING:
            self._inner.sendall(data)
        else:
            await asyncio.get_running_loop().sock_sendall(self._inner, data)
        return len(data)

    def peer_addr(self):
        """Returns the address of the remote peer."""
        return self._inner.getpeername()

    def nodelay(self) -> bool:
        """Returns whether Nagle's algorithm is disabled."""
        return bool(self._inner.getsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY))

    def set_nodelay(self, nodelay: bool):
        self._inner.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, int(nodelay))

    def shutdown(self, how: int = socket.SHUT_RDWR):
        """Shuts down the read half, the write half or both halves of the connection."""
        self._inner.shutdown(how)


class TcpListener(SocketResource):
    """A TCP socket server, listening for connections."""

    __slots__ = ()

    @classmethod
    async def bind(cls, address, backlog: int = 128) -> "TcpListener":
        """Creates a listener bound to the first resolved address.

        Parameters
        ----------
        address : tuple
            a (host, port) pair. Port 0 lets the system pick a free port.
        backlog : int
            maximum number of pending connections
        """
        backend = select_backend(cls._feature)
        family, sockaddr = (await resolve(address, socket.SOCK_STREAM, backend))[0]
        sock = socket.create_server(sockaddr, family=family, backlog=backlog)
        return cls._make(backend, sock)

    async def accept(self):
        """Accepts a new incoming connection.

        Returns
        -------
        stream : TcpStream
            the connection, with the same backend as the listener
        address : tuple
            the address of the peer
        """
        if self._backend is Backend.BLOCKING:
            conn, address = self._inner.accept()
        else:
            conn, address = await asyncio.get_running_loop().sock_accept(self._inner)
        return TcpStream._make(self._backend, conn), address
