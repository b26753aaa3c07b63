import asyncio
import socket

from duo.backend import Backend, select_backend

from .base import SocketResource, resolve


__all__ = ["UdpSocket"]


class UdpSocket(SocketResource):
    """A UDP socket.

    After :meth:`bind`, datagrams can be sent to and received from any address with
    :meth:`send_to` and :meth:`recv_from`. After :meth:`connect`, :meth:`send` and :meth:`recv`
    talk to the connected peer only.
    """

    __slots__ = ()

    @classmethod
    async def bind(cls, address) -> "UdpSocket":
        """Creates a UDP socket bound to the first resolved address.

        Parameters
        ----------
        address : tuple
            a (host, port) pair. Port 0 lets the system pick a free port.
        """
        backend = select_backend(cls._feature)
        family, sockaddr = (await resolve(address, socket.SOCK_DGRAM, backend))[0]
        sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            sock.bind(sockaddr)
        except BaseException:
            sock.close()
            raise
        return cls._make(backend, sock)

    async def connect(self, address):
        """Connects the socket to a remote address, to be used by :meth:`send` and :meth:`recv`."""
        _, sockaddr = (await resolve(address, socket.SOCK_DGRAM, self._backend))[0]
        if self._backend is Backend.BLOCKING:
            self._inner.connect(sockaddr)
        else:
            await asyncio.get_running_loop().sock_connect(self._inner, sockaddr)

    async def send(self, data: bytes) -> int:
        """Sends a datagram to the connected peer, returning the number of bytes sent."""
        if self._backend is Backend.BLOCKING:
            return self._inner.send(data)
        await asyncio.get_running_loop().sock_sendall(self._inner, data)
        return len(data)

    async def recv(self, bufsize: int = 65536) -> bytes:
        """Receives a datagram from the connected peer."""
        if self._backend is Backend.BLOCKING:
            return self._inner.recv(bufsize)
        return await asyncio.get_running_loop().sock_recv(self._inner, bufsize)

    async def send_to(self, data: bytes, address) -> int:
        """Sends a datagram to an address, returning the number of bytes sent."""
        if self._backend is Backend.BLOCKING:
            return self._inner.sendto(data, address)
        return await asyncio.get_running_loop().sock_sendto(self._inner, data, address)

    async def recv_from(self, bufsize: int = 65536):
        """Receives a datagram. Returns a (data, address) pair."""
        if self._backend is Backend.BLOCKING:
            return self._inner.recvfrom(bufsize)
        return await asyncio.get_running_loop().sock_recvfrom(self._inner, bufsize)

    def peer_addr(self):
        """Returns the address of the connected peer."""
        return self._inner.getpeername()

    def broadcast(self) -> bool:
        """Returns whether sending to broadcast addresses is allowed."""
        return bool(self._inner.getsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST))

    def set_broadcast(self, on: bool):
        self._inner.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, int(on))
