"""
Hex Codec Package

This package converts salts from hexadecimal text to bytes and renders
derived keys as lowercase hexadecimal.
"""

from .codec import decode, encode, encode_to_buffer

__all__ = ['decode', 'encode', 'encode_to_buffer']
