"""Additional utilities dealing with input and output.

Instead of:

.. code-block:: python

   import io

You do:

.. code-block:: python

   from duo import io

It will import the io package plus the additional stuff implemented here:

- :func:`stdin`, :func:`stdout` and :func:`stderr`, dual-backend handles to the standard streams
  of the process, whose aio backend is gated by feature 'aio-io';
- :class:`BufReader` and :class:`BufWriter`, which add buffering to any reader or writer of
  duobase, like a :class:`duo.fs.File` or a :class:`duo.net.TcpStream`;
- :func:`empty`, :func:`repeat` and :func:`sink`, readers and writers that never wait.

.. code-block:: python

   from duo import io
   from duo.aio import srun

   reader = io.BufReader(io.stdin())
   line = srun(reader.read_line)

Please see Python package `io`_ for more details.

.. _io:
   https://docs.python.org/3/library/io.html
"""

from io import *

from .std import *
from .util import *
from .buffered import *


__api__ = [
    "Stdin",
    "Stdout",
    "Stderr",
    "stdin",
    "stdout",
    "stderr",
    "BufReader",
    "BufWriter",
    "Lines",
    "Split",
    "DEFAULT_BUF_SIZE",
    "Empty",
    "Repeat",
    "Sink",
    "empty",
    "repeat",
    "sink",
]
