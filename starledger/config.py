# starledger/config.py
import os
from dataclasses import dataclass
from typing import Optional

from starledger.core.types import CHALLENGE_TAG
from starledger.ownership.challenge import DEFAULT_VALIDITY_WINDOW

GENESIS_DATA = "Genesis block: The Times 03 Jan/2009 Chancellor on brink of second bailout for banks."


@dataclass(frozen=True)
class RegistryConfig:
    validity_window: int = DEFAULT_VALIDITY_WINDOW   # seconds; elapsed == window is expired
    challenge_tag: str = CHALLENGE_TAG
    genesis_data: str = GENESIS_DATA
    storage_uri: Optional[str] = None               # None = in-memory only

    def __post_init__(self):
        if self.validity_window <= 0:
            raise ValueError(f"validity_window must be positive, got {self.validity_window}")
        if not self.challenge_tag or ":" in self.challenge_tag:
            raise ValueError(f"Invalid challenge tag: {self.challenge_tag!r}")

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """
        Resolve settings from the environment:
        STARLEDGER_VALIDITY_WINDOW (seconds), STARLEDGER_STORAGE (storage URI or path).
        """
        window_raw = os.environ.get("STARLEDGER_VALIDITY_WINDOW")
        try:
            window = int(window_raw) if window_raw else DEFAULT_VALIDITY_WINDOW
        except ValueError:
            raise ValueError(f"STARLEDGER_VALIDITY_WINDOW must be an integer, got {window_raw!r}")
        storage_uri = os.environ.get("STARLEDGER_STORAGE") or None
        return cls(validity_window=window, storage_uri=storage_uri)
