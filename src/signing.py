"""ECDSA P-256 keys and transaction signatures.

Signatures are DER-encoded ECDSA over SHA-256, carried as lowercase hex.
Public keys are accepted as PEM or as a hex SEC1 point (compressed or not).
"""
from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

SigningKey = ec.EllipticCurvePrivateKey
VerifyingKey = ec.EllipticCurvePublicKey

_CURVE = ec.SECP256R1()


def generate_signing_key() -> SigningKey:
    return ec.generate_private_key(_CURVE)


def sign_message(key: SigningKey, message: bytes) -> str:
    return key.sign(message, ec.ECDSA(hashes.SHA256())).hex()


def verify_signature(public_key: VerifyingKey, message: bytes, signature_hex: str) -> bool:
    """Return True only for a well-formed signature that verifies.

    Malformed hex or DER counts as a failed verification.
    """
    try:
        signature = bytes.fromhex(signature_hex)
    except (TypeError, ValueError):
        return False
    if not signature:
        return False
    try:
        public_key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
    except (InvalidSignature, ValueError):
        return False
    return True


def load_public_key(text: str) -> VerifyingKey:
    """Parse a PEM document or a hex SEC1 point.

    Raises:
        ValueError: if the text is neither, or the key is not on P-256.
    """
    text = text.strip()
    if text.startswith("-----BEGIN"):
        key = serialization.load_pem_public_key(text.encode())
        if not isinstance(key, ec.EllipticCurvePublicKey) or key.curve.name != _CURVE.name:
            raise ValueError("public key is not a P-256 key")
        return key
    try:
        point = bytes.fromhex(text)
    except ValueError as e:
        raise ValueError(f"public key is neither PEM nor hex: {e}") from e
    return ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, point)


def public_key_to_pem(key: VerifyingKey) -> str:
    return key.public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode()


def public_key_to_hex(key: VerifyingKey) -> str:
    return key.public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.CompressedPoint
    ).hex()


__all__ = [
    "SigningKey",
    "VerifyingKey",
    "generate_signing_key",
    "sign_message",
    "verify_signature",
    "load_public_key",
    "public_key_to_pem",
    "public_key_to_hex",
]
