# starledger/crypto/keys.py
"""
Wallet keys and the signature-verification seam.

A wallet address is the base64url-encoded raw Ed25519 public key, so the
address alone is enough to check a signature made by its owner.
"""

from typing import Protocol, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from starledger.core.encoding import b64url_encode, b64url_decode


class SignatureVerifier(Protocol):
    """Black-box primitive: did the key behind `address` sign `message`?"""

    def verify(self, message: bytes, address: str, signature: str) -> bool:
        ...


class WalletKeyPair:
    """Ed25519 wallet. Public-only instances can verify but not sign."""

    def __init__(self, public_key: Ed25519PublicKey, private_key: Ed25519PrivateKey = None):
        self._public = public_key
        self._private = private_key

    @classmethod
    def generate(cls) -> "WalletKeyPair":
        private = Ed25519PrivateKey.generate()
        return cls(private.public_key(), private)

    @classmethod
    def from_private_b64url(cls, value: str) -> "WalletKeyPair":
        private = Ed25519PrivateKey.from_private_bytes(b64url_decode(value.strip()))
        return cls(private.public_key(), private)

    @classmethod
    def from_address(cls, address: str) -> "WalletKeyPair":
        """Raises ValueError if the address is not a 32-byte Ed25519 key."""
        raw = b64url_decode(address)
        return cls(Ed25519PublicKey.from_public_bytes(raw))

    @property
    def address(self) -> str:
        raw = self._public.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return b64url_encode(raw)

    @property
    def can_sign(self) -> bool:
        return self._private is not None

    def private_key_b64url(self) -> str:
        if self._private is None:
            raise ValueError("Public-only wallet has no private key")
        raw = self._private.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return b64url_encode(raw)

    def sign(self, message: Union[str, bytes]) -> str:
        """Sign the exact UTF-8 bytes of message; returns base64url signature."""
        if self._private is None:
            raise ValueError("Public-only wallet cannot sign")
        if isinstance(message, str):
            message = message.encode("utf-8")
        return b64url_encode(self._private.sign(message))

    def verify_bytes(self, signature: bytes, message: bytes) -> bool:
        try:
            self._public.verify(signature, message)
            return True
        except InvalidSignature:
            return False


class Ed25519Verifier:
    """Default SignatureVerifier backed by WalletKeyPair addresses."""

    def verify(self, message: bytes, address: str, signature: str) -> bool:
        try:
            wallet = WalletKeyPair.from_address(address)
            signature_bytes = b64url_decode(signature)
        except ValueError:
            # undecodable address or signature can never verify
            return False
        return wallet.verify_bytes(signature_bytes, message)
