# starledger/ownership/__init__.py
from .challenge import request_challenge, verify_submission, DEFAULT_VALIDITY_WINDOW

__all__ = ["request_challenge", "verify_submission", "DEFAULT_VALIDITY_WINDOW"]
