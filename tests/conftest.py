# tests/conftest.py
import pytest

from starledger.crypto.keys import WalletKeyPair


class FakeClock:
    """Manually driven clock returning whole seconds."""

    def __init__(self, now: int = 1000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class AcceptAllVerifier:
    """Signature primitive stand-in for plain-text addresses like "addr1"."""

    def __init__(self):
        self.calls = []

    def verify(self, message: bytes, address: str, signature: str) -> bool:
        self.calls.append((message, address, signature))
        return True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000)


@pytest.fixture
def wallet() -> WalletKeyPair:
    return WalletKeyPair.generate()


@pytest.fixture
def star() -> dict:
    return {"dec": "68° 52' 56.9", "ra": "16h 29m 1.0s", "story": "test"}
