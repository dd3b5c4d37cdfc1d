# starledger/core/errors.py
"""
Failure taxonomy for submissions and chain integrity.
Each kind carries one stable, client-facing message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class FailureKind(str, Enum):
    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    TIMEOUT = "timeout"
    CHAIN_CORRUPTED = "chain_corrupted"
    NOT_FOUND = "not_found"

    @property
    def client_message(self) -> str:
        return _CLIENT_MESSAGES[self]


_CLIENT_MESSAGES = {
    FailureKind.MALFORMED: "Ownership message is malformed",
    FailureKind.EXPIRED: "Ownership message has expired, request a new one",
    FailureKind.BAD_SIGNATURE: "Signature does not match the wallet address",
    FailureKind.TIMEOUT: "Signature verification timed out",
    FailureKind.CHAIN_CORRUPTED: "Chain integrity violation, contact support",
    FailureKind.NOT_FOUND: "No matching block",
}


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str = ""

    def __str__(self):
        if self.detail:
            return f"{self.kind.client_message} ({self.detail})"
        return self.kind.client_message


class StarLedgerError(Exception):
    """Base for all starledger exceptions."""


class ChainCorruptedError(StarLedgerError):
    """Post-append validation found an inconsistency; the engine stops accepting blocks."""

    def __init__(self, errors: List, message: str = ""):
        self.errors = list(errors)
        super().__init__(message or f"{FailureKind.CHAIN_CORRUPTED.client_message}: {len(self.errors)} issue(s)")


class StorageError(StarLedgerError):
    """Persistent snapshot could not be read or written."""
