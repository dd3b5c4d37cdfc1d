# starledger/ownership/challenge.py
import logging
from typing import Optional

from starledger.core.errors import Failure, FailureKind
from starledger.core.types import CHALLENGE_TAG, Challenge, UnixSeconds
from starledger.crypto.keys import Ed25519Verifier, SignatureVerifier

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_WINDOW = 5 * 60


def request_challenge(address: str, now: UnixSeconds, tag: str = CHALLENGE_TAG) -> str:
    """Message the wallet owner has to sign: "<address>:<now>:starRegistry"."""
    if not address or ":" in address:
        raise ValueError(f"Invalid wallet address: {address!r}")
    return str(Challenge(address=address, issued_at=UnixSeconds(int(now)), tag=tag))


def verify_submission(
    address: str,
    message: str,
    signature: str,
    now: UnixSeconds,
    verifier: Optional[SignatureVerifier] = None,
    validity_window: int = DEFAULT_VALIDITY_WINDOW,
    tag: str = CHALLENGE_TAG,
) -> Optional[Failure]:
    """
    Check a signed ownership message. Returns None when it holds, otherwise
    the first Failure in order: MALFORMED → EXPIRED → BAD_SIGNATURE/TIMEOUT.
    Elapsed time of exactly validity_window seconds is already expired.
    """
    try:
        challenge = Challenge.parse(message)
    except ValueError as e:
        return Failure(FailureKind.MALFORMED, str(e))
    if challenge.tag != tag:
        return Failure(FailureKind.MALFORMED, f"Unknown challenge tag {challenge.tag!r}")

    elapsed = now - challenge.issued_at
    if elapsed >= validity_window:
        return Failure(FailureKind.EXPIRED, f"{elapsed}s elapsed, limit is {validity_window}s")

    verifier = verifier or Ed25519Verifier()
    try:
        valid = verifier.verify(message.encode("utf-8"), address, signature)
    except TimeoutError as e:
        # no retry: a later attempt would run against a different clock reading
        logger.warning("Signature verification timed out for %s", address)
        return Failure(FailureKind.TIMEOUT, str(e))
    if not valid:
        return Failure(FailureKind.BAD_SIGNATURE)
    return None
