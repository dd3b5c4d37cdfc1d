# starledger/crypto/hashing.py
import hashlib
from typing import Any, Dict, Optional

from starledger.core.canon import canonical_json
from starledger.core.encoding import encode_body
from starledger.core.types import Block, UnixSeconds


def block_hash(block: Block) -> str:
    """hex(sha256) over the canonical JSON of the block, hash field excluded."""
    return hashlib.sha256(canonical_json(block.unsealed_dict())).hexdigest()


def seal_block(
    payload: Dict[str, Any],
    previous_block_hash: Optional[str],
    height: int,
    now: UnixSeconds,
) -> Block:
    """
    Encode the payload, fix height/links/time and compute the hash.
    The returned block is frozen; its hash is never recomputed except to validate.
    """
    unsealed = Block(
        height=height,
        time=now,
        body=encode_body(payload),
        previous_block_hash=previous_block_hash,
    )
    return Block(
        height=unsealed.height,
        time=unsealed.time,
        body=unsealed.body,
        previous_block_hash=unsealed.previous_block_hash,
        hash=block_hash(unsealed),
    )
