"""Pydantic schemas and DTOs for the ledger HTTP API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .transaction import Token, TokenKind, Transaction, ZKProof


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "crawchain"
    timestamp: str
    version: str


class TokenIn(BaseModel):
    kind: TokenKind
    amount: float


class ZKProofIn(BaseModel):
    public_input: str = Field("", description="Hex-encoded public input")
    proof: str = Field("", description="Hex-encoded proof bytes")


class TransactionIn(BaseModel):
    """Transaction as submitted by clients; bytes fields are hex."""
    sender: str
    receiver: str
    token: TokenIn
    nonce: int = Field(..., ge=0)
    gas_limit: int = Field(..., ge=0)
    signature: str = Field(..., description="Hex DER ECDSA signature")
    contract_code: Optional[str] = Field(None, description="Hex-encoded WASM module")
    zkp: Optional[ZKProofIn] = None

    def to_transaction(self) -> Transaction:
        """Raises ValueError on malformed hex fields."""
        return Transaction(
            sender=self.sender,
            receiver=self.receiver,
            token=Token(kind=self.token.kind, amount=self.token.amount),
            nonce=self.nonce,
            gas_limit=self.gas_limit,
            signature=self.signature,
            contract_code=bytes.fromhex(self.contract_code) if self.contract_code is not None else None,
            zkp=(
                ZKProof(public_input=bytes.fromhex(self.zkp.public_input), proof=bytes.fromhex(self.zkp.proof))
                if self.zkp is not None
                else None
            ),
        )


class AddBlockRequest(BaseModel):
    transactions: List[TransactionIn] = Field(default_factory=list)
    shard_id: Optional[int] = Field(None, description="Target shard; assigned from the first sender when omitted")


class BlockResponse(BaseModel):
    index: int
    timestamp: str
    transactions: List[Dict[str, Any]]
    previous_hash: str
    hash: str
    shard_id: Optional[int] = None


class RegisterKeyRequest(BaseModel):
    address: str = Field(..., min_length=1)
    public_key: str = Field(..., description="PEM document or hex SEC1 point")


class StakeRequest(BaseModel):
    address: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)


class ContractRequest(BaseModel):
    wasm_hex: str
    gas_limit: int = Field(..., ge=0)


__all__ = [
    "HealthResponse",
    "TokenIn",
    "ZKProofIn",
    "TransactionIn",
    "AddBlockRequest",
    "BlockResponse",
    "RegisterKeyRequest",
    "StakeRequest",
    "ContractRequest",
]
