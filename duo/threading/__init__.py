"""Additional utitlities dealing with threading.

Instead of:

.. code-block:: python

   import threading

You do:

.. code-block:: python

   from duo import threading

It will import the threading package plus the additional stuff implemented here, most notably
:class:`ReadWriteLock`, the blocking backend of :class:`duo.sync.RwLock`.

Please see Python package `threading`_ for more details.

.. _threading:
   https://docs.python.org/3/library/threading.html
"""

# From O'Reilly Python Cookbook by David Ascher, Alex Martelli
# With changes to cover the starvation situation where a continuous
#   stream of readers may starve a writer, and non-blocking acquisition

from threading import *


__all__ = ["ReadWriteLock"]


class ReadWriteLock:
    """A lock object that allows many simultaneous "read locks", but only one "write lock".

    A writer waiting for the lock blocks every new reader, so a continuous stream of readers
    cannot starve a writer. The write lock must be released by the thread that acquired it, and
    that thread cannot acquire it again before releasing it.
    """

    def __init__(self):
        self._read_ready = Condition(RLock())
        self._readers = 0
        self._writers = 0  # active or waiting
        self._owner = None  # ident of the thread holding the write lock

    def acquire_read(self):
        """Acquire a read lock. Blocks only if a thread has acquired or waits for the write lock."""
        with self._read_ready:
            while self._writers > 0:
                self._read_ready.wait()
            self._readers += 1

    def try_acquire_read(self) -> bool:
        """Acquire a read lock if it is possible without blocking. Returns whether it is."""
        if not self._read_ready.acquire(blocking=False):
            return False
        try:
            if self._writers > 0:
                return False
            self._readers += 1
            return True
        finally:
            self._read_ready.release()

    def release_read(self):
        """Release a read lock."""
        with self._read_ready:
            self._readers -= 1
            if not self._readers:
                self._read_ready.notify_all()

    def acquire_write(self):
        """Acquire a write lock. Blocks until there are no acquired read or write locks.

        Raises
        ------
        RuntimeError
            if the current thread already holds the write lock
        """
        self._read_ready.acquire()  # held until release_write()
        if self._owner == get_ident():
            self._read_ready.release()
            raise RuntimeError("The current thread already holds the write lock.")
        self._writers += 1
        while self._readers > 0:
            self._read_ready.wait()
        self._owner = get_ident()

    def try_acquire_write(self) -> bool:
        """Acquire a write lock if it is possible without blocking. Returns whether it is."""
        if not self._read_ready.acquire(blocking=False):
            return False
        if self._owner is not None or self._readers > 0:
            self._read_ready.release()
            return False
        self._writers += 1
        self._owner = get_ident()
        return True

    def release_write(self):
        """Release a write lock."""
        if self._owner != get_ident():
            raise RuntimeError("The write lock is not held by the current thread.")
        self._owner = None
        self._writers -= 1
        self._read_ready.notify_all()
        self._read_ready.release()

    def is_free(self):
        """Returns whether there is no reader and no writer."""
        return not self._readers and not self._writers
