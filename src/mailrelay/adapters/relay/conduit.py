"""Bounded byte channel between the payload encoder and the HTTP client.

The encoder (producer thread) writes chunks; httpx (consumer, calling
thread) iterates the conduit as the request body. At most ``depth`` chunks
wait in between, so a slow upload throttles attachment reads instead of
buffering the whole payload.

Closing rules:

* ``close()`` from the writer ends the payload; ``close(error)`` makes the
  reader raise *error* instead of seeing end-of-payload.
* ``close_reader()`` from the consumer discards queued chunks and releases a
  blocked writer with :class:`ConduitClosed`, so the producer can never hang
  after the HTTP exchange is over.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator


class ConduitClosed(Exception):
    """The reader went away while the writer still had data."""


class Conduit:
    """Thread-safe bounded chunk queue with first-close-wins semantics.

    Attributes:
        bytes_transferred: Bytes handed to the reader so far.

    Example:
        >>> conduit = Conduit(depth=4)
        >>> conduit.write(b"abc")
        >>> conduit.write(b"de")
        >>> conduit.close()
        >>> b"".join(conduit), conduit.bytes_transferred
        (b'abcde', 5)
    """

    def __init__(self, depth: int = 16) -> None:
        if depth < 1:
            raise ValueError(f"conduit depth must be at least 1, got {depth}")
        self._depth = depth
        self._chunks: deque[bytes] = deque()
        self._cond = threading.Condition()
        self._write_closed = False
        self._read_closed = False
        self._error: BaseException | None = None
        self.bytes_transferred = 0

    def write(self, chunk: bytes) -> None:
        """Queue *chunk*, blocking while the conduit is full.

        Raises:
            ConduitClosed: The reader closed the conduit, or the writer
                already did.
        """
        if not chunk:
            return
        with self._cond:
            while len(self._chunks) >= self._depth and not self._read_closed:
                self._cond.wait()
            if self._read_closed:
                raise ConduitClosed("payload reader closed")
            if self._write_closed:
                raise ConduitClosed("write after close")
            self._chunks.append(bytes(chunk))
            self._cond.notify_all()

    def close(self, error: BaseException | None = None) -> None:
        """End the payload; only the first call has any effect."""
        with self._cond:
            if not self._write_closed:
                self._write_closed = True
                self._error = error
            self._cond.notify_all()

    def close_reader(self) -> None:
        """Stop reading: drop queued chunks and wake a blocked writer."""
        with self._cond:
            self._read_closed = True
            self._chunks.clear()
            self._cond.notify_all()

    def read(self) -> bytes:
        """Return the next chunk, or ``b""`` once the payload is complete.

        Raises:
            BaseException: Whatever the writer passed to :meth:`close`.
        """
        with self._cond:
            while not self._chunks and not self._write_closed:
                self._cond.wait()
            if self._error is not None:
                raise self._error
            if not self._chunks:
                return b""
            chunk = self._chunks.popleft()
            self.bytes_transferred += len(chunk)
            self._cond.notify_all()
            return chunk

    def __iter__(self) -> Iterator[bytes]:
        while chunk := self.read():
            yield chunk


__all__ = ["Conduit", "ConduitClosed"]
