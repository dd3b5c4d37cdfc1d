# starledger/core/types.py
import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, NewType, Optional

from starledger.core.encoding import decode_body

UnixSeconds = NewType("UnixSeconds", int)

CHALLENGE_TAG = "starRegistry"

_INTEGER = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class Block:
    """Single sealed entry in the star registry chain."""
    height: int                             # 0 = genesis
    time: UnixSeconds                       # whole seconds since epoch, set at append
    body: str                               # base64url(canonical JSON payload)
    previous_block_hash: Optional[str] = None   # hex(sha256), None only for genesis
    hash: str = ""                          # hex(sha256) over every other field

    def to_dict(self) -> dict:
        return asdict(self)

    def unsealed_dict(self) -> dict:
        """Everything that goes into the digest (all fields except hash)."""
        d = self.to_dict()
        d.pop("hash")
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Block":
        """Strict inverse of to_dict: field types are checked, never coerced."""
        height = d["height"]
        block_time = d["time"]
        for name, value in (("height", height), ("time", block_time)):
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Block {name} must be an integer, got {value!r}")
        previous_block_hash = d.get("previous_block_hash")
        if previous_block_hash is not None and not isinstance(previous_block_hash, str):
            raise ValueError(f"Block previous_block_hash must be a string, got {previous_block_hash!r}")
        for name in ("body", "hash"):
            if not isinstance(d.get(name, ""), str):
                raise ValueError(f"Block {name} must be a string, got {d[name]!r}")
        return cls(
            height=height,
            time=UnixSeconds(block_time),
            body=d["body"],
            previous_block_hash=previous_block_hash,
            hash=d.get("hash", ""),
        )

    @property
    def is_genesis(self) -> bool:
        return self.height == 0

    def decoded(self) -> Dict[str, Any]:
        """Payload in plain form (genesis: {"data": ...}, stars: owner/message/star)."""
        return decode_body(self.body)

    def star_record(self) -> "StarRecord":
        if self.is_genesis:
            raise ValueError("Genesis block carries no star")
        return StarRecord.from_dict(self.decoded())


@dataclass(frozen=True)
class StarRecord:
    """Decoded star payload as returned to clients."""
    owner: str
    message: str
    star: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"owner": self.owner, "message": self.message, "star": dict(self.star)}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StarRecord":
        return cls(owner=d["owner"], message=d["message"], star=d.get("star", {}))


@dataclass(frozen=True)
class Challenge:
    """
    Ownership challenge. Stateless: the issue time travels inside the string
    itself, so nothing is stored server-side between request and submission.
    """
    address: str
    issued_at: UnixSeconds
    tag: str = CHALLENGE_TAG

    def __str__(self) -> str:
        return f"{self.address}:{self.issued_at}:{self.tag}"

    @classmethod
    def parse(cls, message: str) -> "Challenge":
        """Raises ValueError unless message is exactly address:int:tag."""
        parts = message.split(":")
        if len(parts) != 3:
            raise ValueError(f"Expected 3 colon-separated fields, got {len(parts)}")
        address, issued_raw, tag = parts
        if not address:
            raise ValueError("Empty address field")
        if not _INTEGER.fullmatch(issued_raw):
            raise ValueError(f"Issue time is not an integer: {issued_raw!r}")
        return cls(address=address, issued_at=UnixSeconds(int(issued_raw)), tag=tag)
