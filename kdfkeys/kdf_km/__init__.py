"""
Key Derivation Package

This package implements password-based key derivation with PBKDF2
(HMAC-SHA1) on top of pycryptodomex.
"""

from .key_derivation import (KdfEngine, derive_key, split_key_iv,
                             KDF_DEFAULT_PARAMS, MIN_BACKEND_VERSION, MAX_ITERATIONS)

__all__ = ['KdfEngine', 'derive_key', 'split_key_iv', 'KDF_DEFAULT_PARAMS', 'MIN_BACKEND_VERSION', 'MAX_ITERATIONS']
