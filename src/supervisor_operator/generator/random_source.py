"""
Random sources used to fill generated keys.

Anything with a ``read(size) -> bytes`` method can act as a random source,
including ``io.BytesIO``. The implementations here serialize their own access,
so one instance can be shared by concurrent reconciliations.
"""

import secrets
import threading
from typing import Protocol, runtime_checkable

from ..errors import RandomSourceError


@runtime_checkable
class RandomSource(Protocol):
    """A stream of random bytes."""

    def read(self, size: int) -> bytes:
        """Return up to ``size`` bytes; fewer means the source is exhausted."""
        ...


class SecureRandomSource:
    """Cryptographically secure, unbounded source backed by the OS CSPRNG."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def read(self, size: int) -> bytes:
        with self._lock:
            return secrets.token_bytes(size)


class BytesRandomSource:
    """
    Deterministic source replaying a fixed byte string.

    Each read consumes the next bytes of the string. Once the string is used
    up, reads return short (possibly empty) results.
    """

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._position = 0
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        with self._lock:
            return len(self._data) - self._position

    def read(self, size: int) -> bytes:
        with self._lock:
            chunk = self._data[self._position : self._position + size]
            self._position += len(chunk)
            return chunk


def read_exactly(source: RandomSource, size: int) -> bytes:
    """
    Read exactly ``size`` bytes from ``source``.

    Short reads are retried until the source returns nothing, mirroring how
    file-like objects may hand back partial chunks.

    Raises:
        RandomSourceError: If the source is exhausted or fails
    """
    buffer = bytearray()
    try:
        while len(buffer) < size:
            chunk = source.read(size - len(buffer))
            if not chunk:
                break
            buffer.extend(chunk)
    except OSError as e:
        raise RandomSourceError(requested=size, received=len(buffer), cause=e) from e

    if len(buffer) < size:
        raise RandomSourceError(requested=size, received=len(buffer))
    return bytes(buffer)
