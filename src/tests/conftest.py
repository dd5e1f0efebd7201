"""Shared fixtures: keys, a fresh chain, and a signed-transaction factory."""

import itertools

import pytest

from chain.blockchain import Blockchain
from models.transaction import Token, Transaction
from signing import generate_signing_key, sign_message


@pytest.fixture
def alice_key():
    return generate_signing_key()


@pytest.fixture
def bob_key():
    return generate_signing_key()


@pytest.fixture
def chain(alice_key, bob_key):
    bc = Blockchain()
    bc.register_public_key("Alice", alice_key.public_key())
    bc.register_public_key("Bob", bob_key.public_key())
    return bc


@pytest.fixture
def make_tx(alice_key, bob_key):
    keys = {"Alice": alice_key, "Bob": bob_key}
    counter = itertools.count(1)

    def _make(sender="Alice", receiver="Bob", amount=10.0, nonce=None, gas_limit=1000,
              token=None, contract_code=None, key=None, sign=True):
        tx = Transaction(
            sender=sender,
            receiver=receiver,
            token=token or Token.custody(amount),
            nonce=next(counter) if nonce is None else nonce,
            gas_limit=gas_limit,
            contract_code=contract_code,
        )
        if sign:
            tx.signature = sign_message(key or keys[sender], tx.signing_message())
        return tx

    return _make
