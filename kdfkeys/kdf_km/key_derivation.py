"""
Password-Based Key Derivation

This module wraps the PBKDF2 (RFC 2898) implementation of pycryptodomex,
keyed with HMAC-SHA1. The backend is initialized once per process; the
iteration count is handed to it unmodified, since it is what makes each
derivation deliberately slow.
"""

import ctypes
import threading
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import InvalidParameter, KdfUnavailable
from ..secret_buffer.buffer import SecretBuffer, BytesLike
from ..utils.logger import log_debug, log_service

# Default parameters for PBKDF2
KDF_DEFAULT_PARAMS = {
    'hash': 'SHA1',       # HMAC message digest
    'iterations': 1000,   # Work factor; tune to cost 0.5-2 seconds
    'dk_len': 48,         # 32-byte key + 16-byte IV
    'salt_len': 8         # Recommended salt size in bytes
}

# Oldest pycryptodomex release whose PBKDF2 accepts hmac_hash_module
MIN_BACKEND_VERSION = (3, 6, 0)

# The SHA1 fast path hands the count to C as a size_t, which would wrap
MAX_ITERATIONS = 2 ** (8 * ctypes.sizeof(ctypes.c_size_t)) - 1


def _check_positive(name: str, value: Any, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidParameter(f"{name} must be a positive integer")
    if maximum is not None and value > maximum:
        raise InvalidParameter(f"{name} must not exceed {maximum}")
    return value


class KdfEngine:
    """
    PBKDF2-HMAC-SHA1 derivation with process-wide backend initialization.

    The first call to initialize() (made implicitly by derive()) imports and
    checks the backend. The outcome is cached for the whole process: later
    calls return immediately, or raise the same KdfUnavailable again.
    """

    _init_lock = threading.Lock()
    _backend: Optional[Tuple[Any, Any]] = None
    _init_error: Optional[str] = None

    @classmethod
    def _load_backend(cls) -> Tuple[Any, Any]:
        """
        Import PBKDF2 and SHA1 and check the backend version.

        Returns:
            Tuple of (PBKDF2 function, SHA1 hash module)

        Raises:
            KdfUnavailable: If the backend is missing or too old
        """
        try:
            import Cryptodome
            from Cryptodome.Protocol.KDF import PBKDF2
            from Cryptodome.Hash import SHA1
        except ImportError as e:
            raise KdfUnavailable(f"pycryptodomex is not available: {e}") from e

        version = tuple(getattr(Cryptodome, 'version_info', ()))[:3]
        if version < MIN_BACKEND_VERSION:
            wanted = '.'.join(str(v) for v in MIN_BACKEND_VERSION)
            raise KdfUnavailable(f"pycryptodomex version mismatch (need >= {wanted})")

        return PBKDF2, SHA1

    @classmethod
    def initialize(cls) -> None:
        """
        Initialize the backend once; safe to call repeatedly.

        Raises:
            KdfUnavailable: If initialization failed, now or on an earlier call
        """
        with cls._init_lock:
            if cls._backend is not None:
                return
            if cls._init_error is not None:
                raise KdfUnavailable(cls._init_error)
            try:
                cls._backend = cls._load_backend()
            except KdfUnavailable as e:
                cls._init_error = str(e)
                raise
        log_debug("PBKDF2 backend initialized", "initialize", service="kdf")

    @classmethod
    def reset(cls) -> None:
        """Forget the cached initialization outcome."""
        with cls._init_lock:
            cls._backend = None
            cls._init_error = None

    @log_service(service="kdf")
    def derive(self,
               passphrase: BytesLike,
               salt: BytesLike,
               iterations: int,
               output_length: int) -> SecretBuffer:
        """
        Derive `output_length` bytes from a passphrase and salt.

        Args:
            passphrase: Passphrase bytes, used exactly as given
            salt: Salt bytes
            iterations: PBKDF2 iteration count
            output_length: Number of bytes to derive

        Returns:
            A SecretBuffer holding exactly `output_length` bytes; the caller
            releases it

        Raises:
            InvalidParameter: If iterations or output_length is not positive,
                or iterations exceeds MAX_ITERATIONS
            KdfUnavailable: If the backend cannot be initialized
        """
        _check_positive("iterations", iterations, MAX_ITERATIONS)
        _check_positive("output_length", output_length)

        self.initialize()
        pbkdf2, sha1 = self._backend

        log_debug(f"deriving {output_length} bytes with {iterations} iterations",
                  "derive", service="kdf")

        # The backend returns immutable bytes; they are copied into a
        # SecretBuffer and the reference is dropped straight away.
        derived = pbkdf2(memoryview(passphrase).cast("B"),
                         memoryview(salt).cast("B"),
                         dkLen=output_length,
                         count=iterations,
                         hmac_hash_module=sha1)
        try:
            return SecretBuffer.from_bytes(derived)
        finally:
            del derived


def derive_key(password: Union[bytes, bytearray, memoryview],
               salt: bytes,
               iterations: int = KDF_DEFAULT_PARAMS['iterations'],
               dk_len: int = KDF_DEFAULT_PARAMS['dk_len']) -> bytes:
    """
    Derive a key from a password using PBKDF2-HMAC-SHA1.

    Convenience wrapper for library callers that want plain bytes. The
    returned object is immutable and cannot be zeroized; use
    KdfEngine.derive() to keep the result in a SecretBuffer.

    Args:
        password: Password bytes
        salt: Salt value
        iterations: Number of iterations
        dk_len: Length of the derived key in bytes

    Returns:
        Derived key as bytes
    """
    with KdfEngine().derive(password, salt, iterations, dk_len) as buf:
        return bytes(buf.view())


def split_key_iv(derived: BytesLike, key_len: int = 32) -> Dict[str, bytes]:
    """
    Split a derived blob into its key and IV parts.

    The default 48-byte output is meant as a 32-byte AES-256 key followed
    by a 16-byte IV.

    Args:
        derived: Derived bytes
        key_len: Number of leading bytes that form the key

    Returns:
        Dict with 'key' and 'iv' entries
    """
    view = memoryview(derived).cast("B")
    if not 0 < key_len < len(view):
        raise ValueError("key_len must leave at least one byte for the IV")
    return {'key': bytes(view[:key_len]), 'iv': bytes(view[key_len:])}


if __name__ == "__main__":
    # Test the engine with the first RFC 6070 vector
    engine = KdfEngine()
    with engine.derive(b"password", b"salt", 1, 20) as dk:
        print(f"Derived key: {bytes(dk.view()).hex()}")
        assert bytes(dk.view()).hex() == "0c60c80f961f0e71f3a9b524af6012062fe037a6"

    # Same inputs, same output
    first = derive_key(b"test", bytes(4), 1000, 48)
    second = derive_key(b"test", bytes(4), 1000, 48)
    assert first == second and len(first) == 48

    parts = split_key_iv(first)
    print(f"Key: {parts['key'].hex()}")
    print(f"IV:  {parts['iv'].hex()}")

    print("Key derivation tests completed successfully!")
