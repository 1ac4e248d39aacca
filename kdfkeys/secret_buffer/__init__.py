"""
Secret Buffer Package

This package implements the zeroizing byte buffer that holds passphrase
and derived-key material for the lifetime of a derivation.
"""

from .buffer import SecretBuffer, wipe_bytes_like, BLOCK_SIZE

__all__ = ['SecretBuffer', 'wipe_bytes_like', 'BLOCK_SIZE']
