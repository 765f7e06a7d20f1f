"""Bounded in-process byte pipe between a delivery thread and a reader."""

import threading
from typing import Optional

from ..utils.errors import StreamClosedError

DEFAULT_BUFFER_SIZE = 64 * 1024


class BytePipe:
    """
    One producer, one consumer.

    write() blocks while the buffer is full and read() blocks while it is
    empty. Closing wakes both sides: pending bytes can still be read, after
    which read() returns b"" or raises the error the pipe was closed with.
    """

    def __init__(self, max_size: int = DEFAULT_BUFFER_SIZE) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size: int = max_size
        self._buffer: bytearray = bytearray()
        self._closed: bool = False
        self._error: Optional[BaseException] = None
        self._cond: threading.Condition = threading.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def write(self, data: bytes) -> int:
        view = memoryview(data).cast("B")
        written = 0
        with self._cond:
            while written < len(view):
                while not self._closed and len(self._buffer) >= self.max_size:
                    self._cond.wait()
                if self._closed:
                    raise StreamClosedError("write on closed pipe")
                room = self.max_size - len(self._buffer)
                chunk = view[written:written + room]
                self._buffer += chunk
                written += len(chunk)
                self._cond.notify_all()
        return written

    def read(self, size: int = -1) -> bytes:
        with self._cond:
            while not self._buffer and not self._closed:
                self._cond.wait()

            if not self._buffer:
                if self._error is not None:
                    raise self._error
                return b""

            if size < 0 or size >= len(self._buffer):
                size = len(self._buffer)
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
            self._cond.notify_all()
            return data

    def close(self, error: Optional[BaseException] = None) -> None:
        with self._cond:
            if self._error is None:
                self._error = error
            self._closed = True
            self._cond.notify_all()
