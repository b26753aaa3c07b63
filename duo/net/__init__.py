"""Dual-backend networking.

:class:`TcpListener`, :class:`TcpStream` and :class:`UdpSocket` each own a :class:`socket.socket`.
Those created outside of an event loop block the calling thread while waiting. Those created
inside an event loop own a non-blocking socket and wait via the event loop. The aio backend is
gated by feature 'aio-net'.

Constructors :meth:`TcpListener.bind`, :meth:`TcpStream.connect` and :meth:`UdpSocket.bind` are
asyn functions because resolving the address may wait.

.. code-block:: python

   from duo.aio import srun
   from duo import net

   listener = srun(net.TcpListener.bind, ("127.0.0.1", 0))
   client = srun(net.TcpStream.connect, listener.local_addr())
   server, _ = srun(listener.accept)
   srun(client.write, b"ping")
   assert srun(server.read, 4) == b"ping"
"""

from .base import *
from .tcp import *
from .udp import *

__api__ = ["TcpListener", "TcpStream", "UdpSocket", "SocketResource", "resolve"]
