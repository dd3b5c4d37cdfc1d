# starledger/__init__.py
"""
starledger — a tamper-evident star registry.
Hash-chained blocks, wallet ownership proofs via signed challenges, owner lookups.
"""

from starledger.chain.blockchain import Blockchain, SubmissionResult
from starledger.crypto.keys import WalletKeyPair
from starledger.verify.validator import validate_chain, ValidationReport

__version__ = "0.1.0-dev"

__all__ = ["Blockchain", "SubmissionResult", "WalletKeyPair", "validate_chain", "ValidationReport"]
