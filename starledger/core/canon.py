# starledger/core/canon.py
"""
RFC 8785 canonical JSON. Block digests are taken over these bytes, so two
blocks with the same fields always hash the same regardless of key order.
"""

from typing import Any

import jcs


def canonical_json(obj: Any) -> bytes:
    return jcs.canonicalize(obj)


def canonical_line(obj: Any) -> str:
    """One JSONL record: canonical JSON plus newline. jcs escapes control chars, so it stays on one line."""
    return canonical_json(obj).decode("utf-8") + "\n"
