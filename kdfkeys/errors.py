"""
Error Types

Every failure the tool can report is a KdfKeysError subclass carrying the
process exit code the command line front end returns for it.
"""


class KdfKeysError(Exception):
    """Base class for all kdfkeys errors."""

    exit_code = 1


class UsageError(KdfKeysError):
    """Malformed invocation: wrong argument count or unknown option."""

    exit_code = 10


class InvalidParameter(KdfKeysError, ValueError):
    """Iteration count or output length is not a positive integer."""


class InvalidHex(KdfKeysError, ValueError):
    """Text that should be hexadecimal is not."""


class InvalidSalt(KdfKeysError, ValueError):
    """The salt argument did not decode to at least one byte."""


class EmptyPassphrase(KdfKeysError):
    """Nothing was left of the passphrase after terminator stripping."""


class StreamError(KdfKeysError):
    """Reading the passphrase or writing the result failed."""


class AllocationFailure(KdfKeysError, MemoryError):
    """A secret buffer could not grow."""

    exit_code = 3


class KdfUnavailable(KdfKeysError):
    """The PBKDF2 backend could not be initialized."""

    exit_code = 2
