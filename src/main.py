"""CrawChain entrypoint.

``crawchain`` serves the ledger over HTTP; ``crawchain demo`` runs the
single-transaction walkthrough and exits.
"""

import sys

from chain.blockchain import Blockchain
from models.transaction import Token, Transaction
from signing import generate_signing_key, sign_message


def demo() -> Blockchain:
    """Register Alice's key, sign one custody transfer to Bob, and commit it."""
    signing_key = generate_signing_key()

    blockchain = Blockchain()
    blockchain.register_public_key("Alice", signing_key.public_key())

    tx1 = Transaction(
        sender="Alice",
        receiver="Bob",
        token=Token.custody(10.0),
        nonce=1,
        gas_limit=1000,
    )
    # Alice:Bob:CustodyToken(10.0):1:1000
    tx1.signature = sign_message(signing_key, tx1.signing_message())

    shard_id = blockchain.assign_shard(tx1.sender)
    blockchain.add_block([tx1], shard_id)

    print("Blockchain initialized and updated with ECC integration, sharding, and batch verification.")
    return blockchain


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "demo":
        demo()
        return 0
    if args:
        print(f"usage: crawchain [demo]  (unknown command: {args[0]})", file=sys.stderr)
        return 2

    from main_fastapi import run

    run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
