# starledger/chain/blockchain.py
import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from starledger.config import RegistryConfig
from starledger.core.errors import ChainCorruptedError, Failure, FailureKind
from starledger.core.types import Block, StarRecord, UnixSeconds
from starledger.crypto.hashing import seal_block
from starledger.crypto.keys import Ed25519Verifier, SignatureVerifier
from starledger.ownership.challenge import request_challenge, verify_submission
from starledger.storage import StorageBackend, create_storage
from starledger.verify.validator import ValidationError, validate_chain

logger = logging.getLogger(__name__)


def unix_now() -> UnixSeconds:
    return UnixSeconds(int(time.time()))


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of submit_star: either the sealed block or a typed failure."""
    block: Optional[Block] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.block is not None

    @property
    def kind(self) -> Optional[FailureKind]:
        return self.failure.kind if self.failure else None

    def __bool__(self):
        return self.ok


class Blockchain:
    """
    In-process star registry.
    Owns the ordered list of sealed blocks; the genesis block is created at
    construction. Every append is serialized by one lock and followed by a
    full validation pass. Once validation fails the chain is halted and
    refuses further appends.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        clock: Callable[[], int] = unix_now,
        verifier: Optional[SignatureVerifier] = None,
        storage: Optional[Union[StorageBackend, str]] = None,
    ):
        self.config = config or RegistryConfig()
        self._clock = clock
        self._verifier = verifier or Ed25519Verifier()
        self._lock = threading.RLock()
        self._chain: List[Block] = []
        self._halted: Optional[List[ValidationError]] = None

        if storage is None and self.config.storage_uri:
            storage = self.config.storage_uri
        if isinstance(storage, str):
            storage = create_storage(storage)
        self.storage: Optional[StorageBackend] = storage

        self._initialize_chain()

    def _now(self) -> UnixSeconds:
        return UnixSeconds(int(self._clock()))

    def _initialize_chain(self) -> None:
        if self.storage is not None:
            loaded = self.storage.load_blocks()
            if loaded:
                errors = validate_chain(loaded)
                if errors:
                    logger.critical("Stored chain failed validation with %d issue(s)", len(errors))
                    raise ChainCorruptedError(errors)
                self._chain = loaded
                logger.info("Loaded %d blocks from storage", len(loaded))
                return
        genesis = self._add_block({"data": self.config.genesis_data})
        logger.info("Genesis block created: %s", genesis.hash)

    # ── chain state

    @property
    def height(self) -> int:
        """Height of the tip; 0 when only genesis exists."""
        with self._lock:
            return len(self._chain) - 1

    def get_chain_height(self) -> int:
        return self.height

    def get_chain(self) -> List[Block]:
        """Copy of the full chain (immutable view)."""
        with self._lock:
            return self._chain.copy()

    @property
    def halted(self) -> bool:
        return self._halted is not None

    # ── writes

    def _add_block(self, payload: Dict[str, Any]) -> Block:
        with self._lock:
            if self._halted is not None:
                raise ChainCorruptedError(self._halted, "Chain is halted after an integrity violation")

            height = len(self._chain)
            previous_hash = self._chain[-1].hash if self._chain else None
            block = seal_block(payload, previous_hash, height, self._now())
            self._chain.append(block)

            errors = validate_chain(self._chain)
            if errors:
                self._halted = errors
                for error in errors:
                    logger.critical("Chain integrity violation %s", error)
                raise ChainCorruptedError(errors)

            if self.storage is not None:
                try:
                    self.storage.append(block)
                except Exception:
                    # memory must never run ahead of the snapshot file
                    self._chain.pop()
                    logger.error("Failed to persist block %d, append rolled back", block.height)
                    raise
            logger.info("Sealed block %d %s", block.height, block.hash)
            return block

    def append(self, payload: Dict[str, Any]) -> Block:
        """Seal a payload onto the tip, no ownership check."""
        return self._add_block(payload)

    def request_message_ownership_verification(self, address: str) -> str:
        """Challenge string the wallet owner signs before submitting a star."""
        return request_challenge(address, self._now(), tag=self.config.challenge_tag)

    def submit_star(self, address: str, message: str, signature: str, star: Any) -> SubmissionResult:
        """
        Register a star for address. The clock is read once so the window
        check and the signature check see the same instant.
        """
        now = self._now()
        failure = verify_submission(
            address,
            message,
            signature,
            now,
            verifier=self._verifier,
            validity_window=self.config.validity_window,
            tag=self.config.challenge_tag,
        )
        if failure is None and not isinstance(star, Mapping):
            failure = Failure(FailureKind.MALFORMED, "star must be an object")
        if failure is not None:
            logger.warning("Rejected star submission from %s: %s", address, failure.kind.value)
            return SubmissionResult(failure=failure)

        payload = {
            "owner": address,
            "message": message.split(":")[0],
            "star": dict(star),
        }
        try:
            block = self._add_block(payload)
        except ChainCorruptedError as e:
            return SubmissionResult(failure=Failure(FailureKind.CHAIN_CORRUPTED, str(e)))
        return SubmissionResult(block=block)

    # ── queries

    def get_block_by_hash(self, block_hash: str) -> Optional[Block]:
        with self._lock:
            chain = self._chain.copy()
        return next((b for b in chain if b.hash == block_hash), None)

    def get_block_by_height(self, height: int) -> Optional[Block]:
        with self._lock:
            if 0 <= height < len(self._chain):
                return self._chain[height]
        return None

    def get_stars_by_wallet_address(self, address: str) -> List[StarRecord]:
        """Decoded stars owned by address in append order; genesis excluded."""
        records = []
        for block in self.get_chain():
            if block.is_genesis:
                continue
            payload = block.decoded()
            if payload.get("owner") == address:
                records.append(StarRecord.from_dict(payload))
        return records

    def validate_chain(self) -> List[ValidationError]:
        return validate_chain(self.get_chain())

    def close(self) -> None:
        if self.storage is not None:
            self.storage.close()
            self.storage = None
