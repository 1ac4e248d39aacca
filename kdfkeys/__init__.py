"""
kdfkeys - PBKDF2 Key and IV Derivation for the Command Line

This library exposes PBKDF2 (RFC 2898) key derivation to shell scripts
and other tools that need a salted, work-factor-tunable key without
carrying KDF logic themselves.

Key Features:
- Passphrase read from stdin, byte for byte (spaces and NUL bytes included)
- Caller-supplied hex salt and iteration count
- Derived bytes printed as lowercase hex (48 bytes: 32-byte key + 16-byte IV)
- Passphrase and key material kept in zeroizing buffers
- Distinct exit codes for usage, input and backend errors

"""

__version__ = '0.1.0'
__author__ = 'kdfkeys Team'
