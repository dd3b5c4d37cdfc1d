# examples/register_star_demo.py
# Run with: python examples/register_star_demo.py
#
# Walks the full ownership flow against an in-memory registry:
# request challenge → sign with wallet → submit star → query → tamper → validate

import logging
from dataclasses import replace

from starledger import Blockchain, WalletKeyPair, validate_chain


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    registry = Blockchain()
    alice = WalletKeyPair.generate()
    bob = WalletKeyPair.generate()

    for owner, story in [(alice, "Seen from the roof"), (alice, "Second one"), (bob, "Bob's star")]:
        message = registry.request_message_ownership_verification(owner.address)
        result = registry.submit_star(
            owner.address,
            message,
            owner.sign(message),
            {"dec": "68° 52' 56.9", "ra": "16h 29m 1.0s", "story": story},
        )
        print(f"{'✓' if result else '✗'} {story}: {result.block.hash if result else result.failure}")

    # A stranger cannot reuse Alice's challenge
    message = registry.request_message_ownership_verification(alice.address)
    forged = registry.submit_star(alice.address, message, bob.sign(message), {"story": "forged"})
    print(f"Forged submission → {forged.failure}")

    print(f"\nHeight: {registry.height}")
    for record in registry.get_stars_by_wallet_address(alice.address):
        print(f"  {record.star['story']}")

    chain = registry.get_chain()
    print(f"\nValidation errors (original): {validate_chain(chain)}")
    chain[1] = replace(chain[1], time=0)
    for error in validate_chain(chain):
        print(f"Validation error (tampered): {error}")
