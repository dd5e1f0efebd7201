import pytest

from signing import (
    generate_signing_key,
    load_public_key,
    public_key_to_hex,
    public_key_to_pem,
    sign_message,
    verify_signature,
)

MESSAGE = b"Alice:Bob:CustodyToken(10.0):1:1000"


def test_sign_and_verify():
    key = generate_signing_key()
    sig = sign_message(key, MESSAGE)
    assert verify_signature(key.public_key(), MESSAGE, sig)


def test_verify_rejects_other_message_and_other_key():
    key = generate_signing_key()
    sig = sign_message(key, MESSAGE)
    assert not verify_signature(key.public_key(), MESSAGE + b"x", sig)
    assert not verify_signature(generate_signing_key().public_key(), MESSAGE, sig)


@pytest.mark.parametrize("signature", ["", "not-hex", "00", "3006020101020101"])
def test_malformed_signature_is_a_failed_verification(signature):
    key = generate_signing_key()
    assert verify_signature(key.public_key(), MESSAGE, signature) is False


def test_load_public_key_pem_and_hex():
    key = generate_signing_key().public_key()
    from_pem = load_public_key(public_key_to_pem(key))
    from_hex = load_public_key(public_key_to_hex(key))
    assert public_key_to_hex(from_pem) == public_key_to_hex(key)
    assert public_key_to_hex(from_hex) == public_key_to_hex(key)


@pytest.mark.parametrize("text", ["zz", "0400", "-----BEGIN PUBLIC KEY-----\ngarbage\n-----END PUBLIC KEY-----"])
def test_load_public_key_rejects_garbage(text):
    with pytest.raises(ValueError):
        load_public_key(text)
