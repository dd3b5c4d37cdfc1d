# starledger/verify/validator.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from starledger.core.types import Block
from starledger.crypto.hashing import block_hash


class ErrorKind(str, Enum):
    INVALID_HASH = "invalid_hash"
    INVALID_LINK = "invalid_link"
    INVALID_HEIGHT = "invalid_height"


@dataclass(frozen=True)
class ValidationError:
    height: int
    kind: ErrorKind
    message: str = ""

    def __str__(self):
        return f"[{self.height}] {self.kind.value}: {self.message}"


@dataclass
class ValidationReport:
    errors: List[ValidationError] = field(default_factory=list)
    checked: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> Optional[ValidationError]:
        return self.errors[0] if self.errors else None

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return f"Chain is valid ✓ ({self.checked} blocks)"
        lines = [f"Validation FAILED ({len(self.errors)} issues):"]
        for e in self.errors:
            lines.append(f"  • {e}")
        return "\n".join(lines)


def validate_chain(chain: Sequence[Block]) -> List[ValidationError]:
    """
    Walk the chain from genesis and collect every inconsistency.
    Never raises: corruption is reported as data so callers can decide
    whether to refuse an append or just show diagnostics.
    """
    errors: List[ValidationError] = []
    previous: Optional[Block] = None

    for index, block in enumerate(chain):
        if block.height != index:
            errors.append(ValidationError(index, ErrorKind.INVALID_HEIGHT,
                                          f"expected height {index}, got {block.height}"))

        try:
            recomputed = block_hash(block)
        except (TypeError, ValueError) as e:
            recomputed = None
            errors.append(ValidationError(index, ErrorKind.INVALID_HASH, f"cannot hash block: {e}"))
        if recomputed is not None and recomputed != block.hash:
            errors.append(ValidationError(index, ErrorKind.INVALID_HASH,
                                          "stored hash does not match block content"))

        if previous is None:
            if block.previous_block_hash is not None:
                errors.append(ValidationError(index, ErrorKind.INVALID_LINK,
                                              "genesis block must not link to a previous block"))
        elif block.previous_block_hash != previous.hash:
            errors.append(ValidationError(index, ErrorKind.INVALID_LINK,
                                          "previous_block_hash does not match previous block hash"))
        previous = block

    return errors


def validation_report(chain: Sequence[Block]) -> ValidationReport:
    return ValidationReport(errors=validate_chain(chain), checked=len(chain))
