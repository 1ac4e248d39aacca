import pytest

from kdfkeys.kdf_km import KdfEngine
from kdfkeys.secret_buffer import SecretBuffer


@pytest.fixture(autouse=True)
def fresh_backend():
    KdfEngine.reset()
    yield
    KdfEngine.reset()


@pytest.fixture
def released_storage(monkeypatch):
    """
    Record the storage of every SecretBuffer right before it is released.

    Tests assert on the recorded bytearrays afterwards: each must be all
    zeros once release() has run.
    """
    seen = []
    original = SecretBuffer.release

    def recording_release(self):
        if self._buf is not None:
            seen.append(self._buf)
        original(self)

    monkeypatch.setattr(SecretBuffer, "release", recording_release)
    return seen
