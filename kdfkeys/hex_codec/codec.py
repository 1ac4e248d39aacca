"""
Hexadecimal Codec

This module converts between hexadecimal text and raw bytes. Decoding takes
two digits per byte; a trailing odd digit is read on its own as the value
of the last byte, so "abc" decodes to b"\\xab\\x0c". Encoding always yields
two lowercase digits per byte.
"""

from typing import Union

from ..errors import InvalidHex
from ..secret_buffer.buffer import SecretBuffer, BytesLike

HEX_DIGITS = b"0123456789abcdef"

_HEX_VALUES = {c: i for i, c in enumerate("0123456789abcdef")}
_HEX_VALUES.update({c: i for i, c in enumerate("ABCDEF", start=10)})


def _group_value(group: str) -> int:
    """Parse a one- or two-digit hex group."""
    value = 0
    for c in group:
        digit = _HEX_VALUES.get(c)
        if digit is None:
            raise InvalidHex(f"{group!r} is not a hexadecimal value")
        value = value * 16 + digit
    return value


def decode(hex_text: Union[str, bytes]) -> bytes:
    """
    Decode hexadecimal text into bytes.

    Args:
        hex_text: Hex digits, upper or lower case, of even or odd length

    Returns:
        The decoded bytes; empty when `hex_text` is empty

    Raises:
        InvalidHex: If any digit group is not hexadecimal
    """
    if isinstance(hex_text, (bytes, bytearray)):
        try:
            hex_text = bytes(hex_text).decode('ascii')
        except UnicodeDecodeError as e:
            raise InvalidHex("hex text must be ASCII") from e

    out = bytearray()
    for i in range(0, len(hex_text), 2):
        out.append(_group_value(hex_text[i:i + 2]))
    return bytes(out)


def encode(data: BytesLike) -> str:
    """
    Encode bytes as lowercase hex, two digits per byte, no separators.

    Args:
        data: Bytes to encode

    Returns:
        The hex string (empty for empty input)
    """
    return "".join(f"{b:02x}" for b in memoryview(data).cast("B"))


def encode_to_buffer(data: BytesLike, newline: bool = True) -> SecretBuffer:
    """
    Encode bytes as lowercase hex directly into a SecretBuffer.

    The hex form of a key is as sensitive as the key itself, so it is built
    in zeroizable storage rather than as a str.

    Args:
        data: Bytes to encode
        newline: Whether to finish the text with b"\\n"

    Returns:
        A SecretBuffer holding the ASCII hex text; the caller releases it
    """
    view = memoryview(data).cast("B")
    out = SecretBuffer(2 * len(view) + 1)
    try:
        for b in view:
            out.append(HEX_DIGITS[b >> 4])
            out.append(HEX_DIGITS[b & 0x0F])
        if newline:
            out.append(ord("\n"))
    except BaseException:
        out.release()
        raise
    return out


if __name__ == "__main__":
    # Test the codec
    samples = ["00000000", "0011", "DeadBeef", "abc", "7"]
    for text in samples:
        raw = decode(text)
        print(f"{text!r} -> {raw!r} -> {encode(raw)!r}")

    assert decode("abc") == b"\xab\x0c"
    assert encode(decode("DEADBEEF")) == "deadbeef"

    try:
        decode("zz")
    except InvalidHex as e:
        print(f"Rejected: {e}")

    print("Hex codec tests completed successfully!")
