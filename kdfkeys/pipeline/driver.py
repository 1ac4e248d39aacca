"""
Derivation Pipeline

This module runs one derivation end to end:

    decode salt -> validate parameters -> read passphrase -> derive
    -> encode and emit -> release every secret buffer

Each step raises a KdfKeysError subclass on failure. Nothing is written to
the output stream unless every earlier step succeeded, and the passphrase,
key and hex buffers are zeroized on every path out of run_pipeline().

Zeroization covers only storage this package owns. Copies it cannot reach
are left to the interpreter:
- pycryptodomex turns the passphrase view into bytes and returns the key
  as bytes, both immutable;
- the hex line passes through the output stream's own write buffer (for
  sys.stdout.buffer, the BufferedWriter's internal buffer), which is never
  wiped.
"""

import re
from typing import BinaryIO, Optional, Union

from ..errors import InvalidHex, InvalidParameter, InvalidSalt, StreamError
from ..hex_codec.codec import decode, encode_to_buffer
from ..kdf_km.key_derivation import KdfEngine, MAX_ITERATIONS
from ..passphrase.reader import read_passphrase
from ..secret_buffer.buffer import SecretBuffer, wipe_bytes_like
from ..utils.logger import log_debug, log_service

_DECIMAL = re.compile(r"[+]?[0-9]+")


def parse_positive_int(name: str, value: Union[str, int], maximum: Optional[int] = None) -> int:
    """
    Parse a positive base-10 integer argument.

    Args:
        name: Argument name used in the error message
        value: Decimal text, or an int
        maximum: Largest accepted value, if any

    Returns:
        The parsed value

    Raises:
        InvalidParameter: If the value is not numeric, not positive, or
            above `maximum`
    """
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be a positive integer")
    if isinstance(value, int):
        number = value
    else:
        text = value.strip()
        if not _DECIMAL.fullmatch(text):
            raise InvalidParameter(f"{name} must be a positive integer")
        number = int(text, 10)
    if number <= 0:
        raise InvalidParameter(f"{name} must be a positive integer")
    if maximum is not None and number > maximum:
        raise InvalidParameter(f"{name} must not exceed {maximum}")
    return number


def decode_salt(salt_hex: str) -> bytearray:
    """
    Decode the salt argument.

    Raises:
        InvalidSalt: If the text is not hexadecimal or decodes to nothing
    """
    try:
        salt = decode(salt_hex)
    except InvalidHex as e:
        raise InvalidSalt(f"{salt_hex} is not a valid salt (it must be a hexadecimal string)") from e
    if not salt:
        raise InvalidSalt(f"{salt_hex!r} is not a valid salt (it must be a hexadecimal string)")
    return bytearray(salt)


def _emit(output_stream: BinaryIO, text: SecretBuffer) -> None:
    try:
        output_stream.write(text.view())
        output_stream.flush()
    except OSError as e:
        raise StreamError(f"cannot write result: {e}") from e


@log_service(service="pipeline")
def run_pipeline(salt_hex: str,
                 iterations: Union[str, int],
                 output_length: Union[str, int],
                 input_stream: BinaryIO,
                 output_stream: BinaryIO,
                 strict: bool = False,
                 engine: Optional[KdfEngine] = None) -> None:
    """
    Derive a key from the passphrase on `input_stream` and write it as hex.

    Args:
        salt_hex: Salt as hexadecimal text
        iterations: PBKDF2 iteration count (decimal text or int)
        output_length: Number of bytes to derive (decimal text or int)
        input_stream: Binary stream holding the passphrase
        output_stream: Binary stream receiving the hex line
        strict: Only strip the passphrase's last byte when it is a newline
        engine: KdfEngine to use; a new one by default

    Raises:
        InvalidSalt, InvalidParameter, EmptyPassphrase, AllocationFailure,
        KdfUnavailable, StreamError
    """
    salt = decode_salt(salt_hex)
    passphrase = None
    derived = None
    hex_text = None
    try:
        count = parse_positive_int("count", iterations, MAX_ITERATIONS)
        length = parse_positive_int("result_len", output_length)
        log_debug(f"salt of {len(salt)} bytes, {count} iterations, {length} output bytes",
                  "run_pipeline", service="pipeline")

        passphrase = read_passphrase(input_stream, strict=strict)

        engine = engine if engine is not None else KdfEngine()
        derived = engine.derive(passphrase.view(), salt, count, length)

        hex_text = encode_to_buffer(derived.view())
        _emit(output_stream, hex_text)
    finally:
        for buf in (hex_text, derived, passphrase):
            if buf is not None:
                buf.release()
        wipe_bytes_like(salt)
