"""
Passphrase Package

This package reads the passphrase from the private input stream into a
zeroizing buffer.
"""

from .reader import read_passphrase, READ_CHUNK_SIZE

__all__ = ['read_passphrase', 'READ_CHUNK_SIZE']
