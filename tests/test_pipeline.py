"""
tests/test_pipeline.py

Contract:
- A run writes exactly 2 * output_length lowercase hex digits plus "\\n".
- Salt and parameters are checked before the passphrase is read or any
  PBKDF2 work is done.
- Every secret buffer is zeroized on success and on failure, and nothing
  reaches the output stream on failure.
"""

import hashlib
import io

import pytest

from kdfkeys.errors import (EmptyPassphrase, InvalidParameter, InvalidSalt,
                            KdfUnavailable, StreamError)
from kdfkeys.kdf_km import KdfEngine, MAX_ITERATIONS
from kdfkeys.pipeline import run_pipeline, parse_positive_int, decode_salt


def _run(salt, count, length, data, **kwargs):
    out = io.BytesIO()
    run_pipeline(salt, count, length, io.BytesIO(data), out, **kwargs)
    return out.getvalue()


def test_scenario_zero_salt_1000_iterations():
    first = _run("00000000", "1000", "48", b"test\n")
    second = _run("00000000", "1000", "48", b"test\n")

    assert first == second
    assert len(first) == 97
    assert first.endswith(b"\n")
    assert first[:-1] == hashlib.pbkdf2_hmac("sha1", b"test", bytes(4), 1000, 48).hex().encode()


def test_scenario_spaces_passphrase_differs_from_empty():
    out = _run("0011", "1", "4", b"   \n")
    assert len(out) == 9
    assert out[:-1] == hashlib.pbkdf2_hmac("sha1", b"   ", b"\x00\x11", 1, 4).hex().encode()

    empty_out = io.BytesIO()
    with pytest.raises(EmptyPassphrase):
        run_pipeline("0011", "1", "4", io.BytesIO(b"\n"), empty_out)
    assert empty_out.getvalue() == b""


def test_nul_bytes_change_the_result():
    with_nul = _run("0011", "1", "8", b"a\x00b\n")
    without_nul = _run("0011", "1", "8", b"ab\n")
    assert with_nul != without_nul


def test_output_is_lowercase_hex():
    out = _run("DEADBEEF", 2, 16, b"pw\n")
    text = out[:-1].decode("ascii")
    assert text == text.lower()
    assert len(text) == 32
    int(text, 16)


def test_odd_length_salt_matches_its_decoding():
    out = _run("abc", "1", "8", b"pw\n")
    assert out[:-1] == hashlib.pbkdf2_hmac("sha1", b"pw", b"\xab\x0c", 1, 8).hex().encode()


def test_strict_mode_keeps_unterminated_passphrase():
    strict = _run("00", "1", "8", b"pw", strict=True)
    lenient = _run("00", "1", "8", b"pw")
    assert strict[:-1] == hashlib.pbkdf2_hmac("sha1", b"pw", b"\x00", 1, 8).hex().encode()
    assert lenient[:-1] == hashlib.pbkdf2_hmac("sha1", b"p", b"\x00", 1, 8).hex().encode()


@pytest.mark.parametrize("salt", ["", "zz", "0q"])
def test_invalid_salt(salt):
    out = io.BytesIO()
    stdin = io.BytesIO(b"pw\n")
    with pytest.raises(InvalidSalt):
        run_pipeline(salt, "1", "8", stdin, out)
    assert out.getvalue() == b""
    assert stdin.tell() == 0


@pytest.mark.parametrize("count, length", [("0", "8"), ("-1", "8"), ("abc", "8"), ("1", "0"),
                                           ("1", "-48"), ("1", "4x"), ("1.5", "8")])
def test_invalid_parameters_do_no_crypto_work(count, length, monkeypatch):
    def must_not_run(cls):
        raise AssertionError("backend touched")

    monkeypatch.setattr(KdfEngine, "_load_backend", classmethod(must_not_run))
    out = io.BytesIO()
    stdin = io.BytesIO(b"pw\n")
    with pytest.raises(InvalidParameter):
        run_pipeline("00", count, length, stdin, out)
    assert out.getvalue() == b""
    assert stdin.tell() == 0


def test_parse_positive_int():
    assert parse_positive_int("count", "1000") == 1000
    assert parse_positive_int("count", " 42 ") == 42
    assert parse_positive_int("count", "+7") == 7
    assert parse_positive_int("count", 5) == 5
    with pytest.raises(InvalidParameter):
        parse_positive_int("count", "")
    with pytest.raises(InvalidParameter):
        parse_positive_int("count", "0x10")
    assert parse_positive_int("count", "10", maximum=10) == 10
    with pytest.raises(InvalidParameter):
        parse_positive_int("count", "11", maximum=10)


def test_oversized_iteration_count_is_rejected_before_reading(monkeypatch):
    def must_not_run(cls):
        raise AssertionError("backend touched")

    monkeypatch.setattr(KdfEngine, "_load_backend", classmethod(must_not_run))
    out = io.BytesIO()
    stdin = io.BytesIO(b"pw\n")
    with pytest.raises(InvalidParameter):
        run_pipeline("00", str(2 ** 64 + 1), "8", stdin, out)
    assert out.getvalue() == b""
    assert stdin.tell() == 0


def test_largest_iteration_count_is_accepted_by_validation():
    assert parse_positive_int("count", str(MAX_ITERATIONS), MAX_ITERATIONS) == MAX_ITERATIONS


def test_decode_salt_returns_bytes():
    assert decode_salt("0011") == bytearray(b"\x00\x11")


def test_buffers_zeroized_on_success(released_storage):
    _run("00000000", "10", "48", b"correct horse\n")
    # passphrase, derived key and hex text
    assert len(released_storage) >= 3
    assert all(not any(storage) for storage in released_storage)


def test_buffers_zeroized_when_backend_unavailable(released_storage, monkeypatch):
    def broken(cls):
        raise KdfUnavailable("libgcrypt version mismatch")

    monkeypatch.setattr(KdfEngine, "_load_backend", classmethod(broken))
    out = io.BytesIO()
    with pytest.raises(KdfUnavailable):
        run_pipeline("00", "1", "8", io.BytesIO(b"secret\n"), out)
    assert out.getvalue() == b""
    assert released_storage
    assert all(not any(storage) for storage in released_storage)


class _BrokenOutput(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        raise BrokenPipeError("closed")


def test_write_failure_is_stream_error(released_storage):
    with pytest.raises(StreamError):
        run_pipeline("00", "1", "8", io.BytesIO(b"secret\n"), _BrokenOutput())
    assert all(not any(storage) for storage in released_storage)


def test_uses_given_engine():
    class RecordingEngine(KdfEngine):
        def __init__(self):
            self.calls = []

        def derive(self, passphrase, salt, iterations, output_length):
            self.calls.append((bytes(passphrase), bytes(salt), iterations, output_length))
            return super().derive(passphrase, salt, iterations, output_length)

    engine = RecordingEngine()
    out = io.BytesIO()
    run_pipeline("0a0b", "3", "5", io.BytesIO(b"pw\n"), out, engine=engine)
    assert engine.calls == [(b"pw", b"\x0a\x0b", 3, 5)]
    assert len(out.getvalue()) == 11
