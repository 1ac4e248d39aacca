"""
Passphrase Reader

Reads a passphrase from a binary stream with exact byte fidelity. Spaces,
tabs and NUL bytes are all part of the passphrase; a passphrase made only
of spaces is valid. Exactly one trailing byte, the line terminator, is
removed after end-of-stream.
"""

from typing import BinaryIO

from ..errors import AllocationFailure, EmptyPassphrase, StreamError
from ..secret_buffer.buffer import SecretBuffer, wipe_bytes_like
from ..utils.logger import log_debug

# Bytes requested from the stream per read call
READ_CHUNK_SIZE = 4096


def _strip_terminator(buf: SecretBuffer, strict: bool) -> None:
    if len(buf) == 0:
        return
    # Without strict mode the last byte goes unconditionally, even when
    # the stream ended without a newline.
    if strict and buf.view()[-1] != ord("\n"):
        return
    buf.truncate(len(buf) - 1)


def read_passphrase(stream: BinaryIO, strict: bool = False) -> SecretBuffer:
    """
    Read a passphrase from `stream` until end-of-stream.

    Args:
        stream: Binary input stream, typically sys.stdin.buffer
        strict: Only strip the final byte when it is a newline

    Returns:
        A SecretBuffer with the passphrase; the caller releases it

    Raises:
        EmptyPassphrase: If nothing is left after terminator stripping
        AllocationFailure: If the buffer cannot grow
        StreamError: If reading the stream fails
    """
    buf = SecretBuffer()
    chunk = bytearray(READ_CHUNK_SIZE)
    try:
        while True:
            try:
                count = stream.readinto(chunk)
            except MemoryError as e:
                raise AllocationFailure("out of memory while reading passphrase") from e
            except OSError as e:
                raise StreamError(f"cannot read passphrase: {e}") from e
            if not count:
                break
            buf.extend(memoryview(chunk)[:count])

        _strip_terminator(buf, strict)
        if len(buf) == 0:
            raise EmptyPassphrase("password is empty")
    except BaseException:
        buf.release()
        raise
    finally:
        wipe_bytes_like(chunk)

    log_debug(f"read passphrase of {len(buf)} bytes", "read_passphrase", service="passphrase")
    return buf
