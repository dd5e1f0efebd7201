"""
Transaction data model for token transfers recorded on the ledger.

A transaction moves either custody or energy tokens between two addresses,
is signed by the sender, and may carry WebAssembly contract code and an
opaque zero-knowledge proof payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

Address = str


class TokenKind(str, Enum):
    CUSTODY = "CustodyToken"
    ENERGY = "EnergyToken"


@dataclass(frozen=True)
class Token:
    """An amount of one token kind."""

    kind: TokenKind
    amount: float

    def display(self) -> str:
        # Shortest round-trip float repr, so 10 renders as "10.0"
        return f"{self.kind.value}({float(self.amount)!r})"

    def __str__(self) -> str:
        return self.display()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "amount": float(self.amount)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        return cls(kind=TokenKind(data["kind"]), amount=float(data["amount"]))

    @classmethod
    def custody(cls, amount: float) -> "Token":
        return cls(TokenKind.CUSTODY, float(amount))

    @classmethod
    def energy(cls, amount: float) -> "Token":
        return cls(TokenKind.ENERGY, float(amount))


@dataclass(frozen=True)
class ZKProof:
    """Zero-knowledge proof payload. Stored with the transaction, never verified."""

    public_input: bytes
    proof: bytes

    def to_dict(self) -> dict[str, Any]:
        return {"public_input": self.public_input.hex(), "proof": self.proof.hex()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ZKProof":
        return cls(
            public_input=bytes.fromhex(data.get("public_input", "")),
            proof=bytes.fromhex(data.get("proof", "")),
        )


@dataclass
class Transaction:
    """
    A signed token transfer.

    Attributes:
        sender: Address of the signer
        receiver: Destination address
        token: Token kind and amount moved
        nonce: Ledger-wide single-use number
        contract_code: Optional WASM module run when the transaction is committed
        gas_limit: Execution budget, must be positive to be accepted
        zkp: Optional zero-knowledge proof payload
        signature: Hex-encoded DER ECDSA signature over ``signing_message()``
    """

    sender: Address
    receiver: Address
    token: Token
    nonce: int
    gas_limit: int
    signature: str = ""
    contract_code: Optional[bytes] = None
    zkp: Optional[ZKProof] = None

    def signing_message(self) -> bytes:
        return (
            f"{self.sender}:{self.receiver}:{self.token.display()}:{self.nonce}:{self.gas_limit}"
        ).encode("utf-8")

    def to_dict(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "receiver": self.receiver,
            "token": self.token.to_dict(),
            "nonce": self.nonce,
            "contract_code": self.contract_code.hex() if self.contract_code is not None else None,
            "gas_limit": self.gas_limit,
            "zkp": self.zkp.to_dict() if self.zkp is not None else None,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        code = data.get("contract_code")
        zkp = data.get("zkp")
        return cls(
            sender=data["sender"],
            receiver=data["receiver"],
            token=Token.from_dict(data["token"]),
            nonce=int(data["nonce"]),
            gas_limit=int(data["gas_limit"]),
            signature=data.get("signature", ""),
            contract_code=bytes.fromhex(code) if code is not None else None,
            zkp=ZKProof.from_dict(zkp) if zkp is not None else None,
        )


__all__ = ["Address", "TokenKind", "Token", "ZKProof", "Transaction"]
