# starledger/core/encoding.py
import base64
import binascii
import json
from typing import Any, Dict

from starledger.core.canon import canonical_json


def b64url_encode(data: bytes) -> str:
    """Encode bytes to base64url (no padding, URL-safe)."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """Decode base64url string back to bytes."""
    # Restore padding
    padding = len(s) % 4
    if padding:
        s += "=" * (4 - padding)
    return base64.urlsafe_b64decode(s)


def encode_body(payload: Dict[str, Any]) -> str:
    """Pack a block payload into its stored (opaque) form: base64url of canonical JSON."""
    return b64url_encode(canonical_json(payload))


def decode_body(body: str) -> Dict[str, Any]:
    """
    Exact inverse of encode_body.
    Raises ValueError if the body is not base64url-wrapped JSON.
    """
    try:
        raw = b64url_decode(body)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Block body is not valid base64url: {e}") from e
    return json.loads(raw.decode("utf-8"))
