"""Base of the dual-backend socket resources."""

import asyncio
import socket
import typing as tp

from duo.backend import Backend, DualBackend, select_backend


__all__ = ["SocketResource", "resolve"]


async def resolve(
    address: tp.Tuple[str, int], type: int, backend: tp.Optional[Backend] = None
) -> tp.List[tuple]:
    """An asyn function resolving a (host, port) address into a list of (family, sockaddr).

    With the aio backend it invokes the resolver of the running event loop. Otherwise it invokes
    :func:`socket.getaddrinfo`.

    Parameters
    ----------
    address : tuple
        a (host, port) pair
    type : int
        socket type, like :data:`socket.SOCK_STREAM`
    backend : duo.backend.Backend, optional
        the backend to resolve with. Operations of an existing resource pass their own backend.
        If not provided, it is selected depending on whether an event loop is running.
    """
    if backend is None:
        backend = select_backend(SocketResource._feature)
    host, port = address[0], address[1]
    if backend is Backend.AIO:
        infos = await asyncio.get_running_loop().getaddrinfo(host, port, type=type)
    else:
        infos = socket.getaddrinfo(host, port, type=type)
    if not infos:
        raise OSError("Cannot resolve address {}.".format(address))
    return [(family, sockaddr) for family, _, _, _, sockaddr in infos]


def _ttl_option(sock: socket.socket):
    if sock.family == socket.AF_INET6:
        return socket.IPPROTO_IPV6, socket.IPV6_UNICAST_HOPS
    return socket.IPPROTO_IP, socket.IP_TTL


class SocketResource(DualBackend):
    """Base class of a resource wrapping a :class:`socket.socket`.

    Both backends own a socket. In the aio backend the socket is non-blocking and the waiting
    operations are delegated to the `sock_*` methods of the running event loop.
    """

    __slots__ = ()

    _feature = "aio-net"

    @classmethod
    def from_aio(cls, sock: socket.socket):
        obj = super().from_aio(sock)
        sock.setblocking(False)
        return obj

    @classmethod
    def _make(cls, backend: Backend, sock: socket.socket):
        if backend is Backend.AIO:
            sock.setblocking(False)
        return cls._wrap(backend, sock)

    @classmethod
    def from_socket(cls, sock: socket.socket):
        """Adopts a socket, selecting the backend depending on whether an event loop is running."""
        return cls._make(select_backend(cls._feature), sock)

    def fileno(self) -> int:
        return self._inner.fileno()

    def local_addr(self):
        """Returns the address the socket is bound to."""
        return self._inner.getsockname()

    def ttl(self) -> int:
        """Returns the time-to-live, or hop limit for IPv6, of outgoing packets."""
        return self._inner.getsockopt(*_ttl_option(self._inner))

    def set_ttl(self, ttl: int):
        """Sets the time-to-live, or hop limit for IPv6, of outgoing packets."""
        self._inner.setsockopt(*_ttl_option(self._inner), ttl)

    def close(self):
        self._inner.close()

    @property
    def closed(self) -> bool:
        return self._inner.fileno() == -1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
