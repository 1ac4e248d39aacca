"""
Zeroizing Secret Buffer

This module provides an owned, growable byte buffer for passphrase and key
material. Storage is a bytearray managed by hand (capacity doubling) so
that every block the buffer ever held can be overwritten with zeros before
it is dropped: on growth, on truncation and on release.

Python gives no guarantee that the interpreter never copied the data
elsewhere; this is best-effort zeroization of the storage we own.
"""

from typing import Any, Optional, Union

from ..errors import AllocationFailure

# Initial capacity, in bytes, of a new buffer
BLOCK_SIZE = 40

BytesLike = Union[bytes, bytearray, memoryview]


def wipe_bytes_like(x: Any) -> None:
    """
    Best-effort zeroization.

    - bytearray: in-place overwrite
    - writable memoryview: in-place overwrite
    - bytes/readonly: no-op, they cannot be mutated
    """
    if isinstance(x, bytearray):
        x[:] = bytes(len(x))
        return

    if isinstance(x, memoryview) and not x.readonly:
        flat = x.cast("B") if x.format != "B" or x.ndim != 1 else x
        flat[:] = bytes(x.nbytes)


class SecretBuffer:
    """
    Growable byte buffer that zeroizes its storage before releasing it.

    Use it as a context manager, or call release() on every exit path:

        with SecretBuffer() as buf:
            buf.extend(data)
            ...
    """

    def __init__(self, initial_capacity: int = BLOCK_SIZE):
        """
        Allocate zero-initialized storage.

        Args:
            initial_capacity: Number of bytes to reserve up front (at least 1)
        """
        if initial_capacity < 1:
            raise ValueError("initial_capacity must be at least 1")
        self._buf: Optional[bytearray] = self._allocate(initial_capacity)
        self._length = 0

    @staticmethod
    def _allocate(size: int) -> bytearray:
        try:
            return bytearray(size)
        except MemoryError as e:
            raise AllocationFailure(f"cannot allocate {size} bytes of secret storage") from e

    def _storage(self) -> bytearray:
        if self._buf is None:
            raise ValueError("SecretBuffer has been released")
        return self._buf

    @property
    def capacity(self) -> int:
        return len(self._storage())

    @property
    def released(self) -> bool:
        return self._buf is None

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        if self._buf is None:
            return "<SecretBuffer released>"
        return f"<SecretBuffer len={self._length}>"

    def _reserve(self, needed: int) -> None:
        """
        Make room for at least `needed` bytes in total.

        Capacity doubles until it fits. The used bytes are copied into the
        new storage and the old storage is zeroized before it is dropped.
        """
        old = self._storage()
        if needed <= len(old):
            return

        new_capacity = len(old)
        while new_capacity < needed:
            new_capacity *= 2

        new = self._allocate(new_capacity)
        # Copy through a view; slicing `old` would leave an unwiped temporary.
        used = memoryview(old)[:self._length]
        try:
            new[:self._length] = used
        finally:
            used.release()
        wipe_bytes_like(old)
        self._buf = new

    def append(self, byte: int) -> None:
        """Append a single byte value (0-255)."""
        if not 0 <= byte <= 255:
            raise ValueError("byte must be in range(0, 256)")
        self._reserve(self._length + 1)
        self._buf[self._length] = byte
        self._length += 1

    def extend(self, data: BytesLike) -> None:
        """Append every byte of a bytes-like object, unmodified."""
        view = memoryview(data).cast("B")
        count = len(view)
        if count == 0:
            return
        self._reserve(self._length + count)
        self._buf[self._length:self._length + count] = view
        self._length += count

    def truncate(self, length: int) -> None:
        """
        Shrink the logical length to `length` bytes.

        The bytes past the new length are zeroized in storage, not merely
        excluded from the view.
        """
        buf = self._storage()
        if not 0 <= length <= self._length:
            raise ValueError("truncate length out of range")
        buf[length:self._length] = bytes(self._length - length)
        self._length = length

    def view(self) -> memoryview:
        """Return a read-only view of the used bytes, without copying them."""
        return memoryview(self._storage())[:self._length].toreadonly()

    def release(self) -> None:
        """
        Zeroize the whole storage and drop it.

        Safe to call more than once; later calls do nothing.
        """
        if self._buf is None:
            return
        wipe_bytes_like(self._buf)
        self._buf = None
        self._length = 0

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "SecretBuffer":
        """Create a buffer holding a copy of `data`."""
        view = memoryview(data).cast("B")
        buf = cls(max(len(view), 1))
        buf.extend(view)
        return buf
