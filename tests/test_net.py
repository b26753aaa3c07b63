import asyncio
import socket
import threading

import pytest

from duo import features
from duo.aio import srun
from duo.net import TcpListener, TcpStream, UdpSocket


LOCALHOST = ("127.0.0.1", 0)


# -----------------------------------------------------------------------------
# TCP
# -----------------------------------------------------------------------------


def test_blocking_tcp_roundtrip():
    with srun(TcpListener.bind, LOCALHOST) as listener:
        assert listener.is_blocking()
        host, port = listener.local_addr()
        assert port != 0

        client = srun(TcpStream.connect, (host, port))
        server, peer = srun(listener.accept)
        assert server.is_blocking()
        assert peer == client.local_addr()
        assert client.peer_addr() == (host, port)

        assert srun(client.write, b"ping") == 4
        assert srun(server.read, 4) == b"ping"
        srun(server.write, b"pong")
        assert srun(client.read, 4) == b"pong"

        client.shutdown(socket.SHUT_WR)
        assert srun(server.read) == b""
        client.close()
        server.close()
        assert client.closed and server.closed


def test_tcp_options():
    with srun(TcpListener.bind, LOCALHOST) as listener:
        listener.set_ttl(42)
        assert listener.ttl() == 42
        with srun(TcpStream.connect, listener.local_addr()) as client:
            client.set_nodelay(True)
            assert client.nodelay()
            client.set_nodelay(False)
            assert not client.nodelay()
            assert isinstance(client.fileno(), int)
            server, _ = srun(listener.accept)
            server.close()


def test_blocking_listener_serves_thread():
    with srun(TcpListener.bind, LOCALHOST) as listener:
        address = listener.local_addr()
        received = []

        def serve():
            stream, _ = srun(listener.accept)
            with stream:
                received.append(srun(stream.read, 5))

        t = threading.Thread(target=serve)
        t.start()
        with srun(TcpStream.connect, address) as client:
            srun(client.write, b"hello")
        t.join()
        assert received == [b"hello"]


def test_connect_refused():
    with srun(TcpListener.bind, LOCALHOST) as listener:
        address = listener.local_addr()
    with pytest.raises(ConnectionRefusedError):
        srun(TcpStream.connect, address)


@pytest.mark.asyncio
async def test_aio_tcp_roundtrip():
    async with await TcpListener.bind(LOCALHOST) as listener:
        assert listener.is_aio()
        assert listener.unwrap_aio().getblocking() is False

        client, (server, _) = await asyncio.gather(
            TcpStream.connect(listener.local_addr()), listener.accept()
        )
        assert client.is_aio() and server.is_aio()

        async def receive(n):
            data = b""
            while len(data) < n:
                data += await server.read()
            return data

        written, data = await asyncio.gather(
            client.write(b"x" * 100000), receive(100000)
        )
        assert written == 100000 and data == b"x" * 100000

        client.close()
        assert await server.read() == b""
        server.close()


@pytest.mark.asyncio
async def test_aio_connect_refused():
    async with await TcpListener.bind(LOCALHOST) as listener:
        address = listener.local_addr()
    with pytest.raises(ConnectionRefusedError):
        await TcpStream.connect(address)


@pytest.mark.asyncio
async def test_net_gated_by_feature():
    with features.override({"aio-net": False}):
        listener = await TcpListener.bind(LOCALHOST)
    assert listener.is_blocking()
    listener.close()


@pytest.mark.asyncio
async def test_from_socket_inside_event_loop():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    stream = TcpStream.from_socket(sock)
    assert stream.is_aio()
    assert sock.getblocking() is False
    stream.close()


# -----------------------------------------------------------------------------
# UDP
# -----------------------------------------------------------------------------


def test_blocking_udp():
    a = srun(UdpSocket.bind, LOCALHOST)
    b = srun(UdpSocket.bind, LOCALHOST)
    with a, b:
        assert srun(a.send_to, b"hi", b.local_addr()) == 2
        data, sender = srun(b.recv_from)
        assert data == b"hi" and sender == a.local_addr()

        srun(a.connect, b.local_addr())
        assert a.peer_addr() == b.local_addr()
        srun(a.send, b"again")
        assert srun(b.recv) == b"again"

        a.set_broadcast(True)
        assert a.broadcast()
        a.set_ttl(7)
        assert a.ttl() == 7


@pytest.mark.asyncio
async def test_aio_udp():
    a = await UdpSocket.bind(LOCALHOST)
    b = await UdpSocket.bind(LOCALHOST)
    with a, b:
        assert a.is_aio() and b.is_aio()
        receiving = asyncio.create_task(b.recv_from(1024))
        await asyncio.sleep(0)
        assert await a.send_to(b"hi", b.local_addr()) == 2
        data, sender = await receiving
        assert data == b"hi" and sender == a.local_addr()

        await a.connect(b.local_addr())
        assert await a.send(b"abc") == 3
        assert await b.recv() == b"abc"


def test_blocking_udp_connect_inside_event_loop():
    a = srun(UdpSocket.bind, LOCALHOST)
    b = srun(UdpSocket.bind, LOCALHOST)
    port = b.local_addr()[1]

    async def main():
        coro = a.connect(("127.0.0.1", port))
        with pytest.raises(StopIteration):
            coro.send(None)  # completes without yielding to the loop
        assert a.is_blocking()
        assert a.peer_addr()[1] == port

    with a, b:
        asyncio.run(main())
