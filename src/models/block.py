"""
Block data model: an ordered batch of transactions linked to its predecessor
by hash.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .transaction import Transaction

GENESIS_PREVIOUS_HASH = "0"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def canonical_transactions(transactions: list[Transaction]) -> str:
    """Stable JSON text of a transaction list, used as hash input."""
    return json.dumps(
        [tx.to_dict() for tx in transactions], sort_keys=True, separators=(",", ":")
    )


def calculate_hash(
    index: int,
    timestamp: str,
    transactions: list[Transaction],
    previous_hash: str,
    shard_id: Optional[int],
) -> str:
    hasher = hashlib.sha256()
    hasher.update(str(index).encode())
    hasher.update(timestamp.encode())
    hasher.update(canonical_transactions(transactions).encode())
    hasher.update(previous_hash.encode())
    if shard_id is not None:
        hasher.update(str(shard_id).encode())
    return hasher.hexdigest()


@dataclass
class Block:
    """
    A block on one shard.

    Attributes:
        index: Height of the block within its shard, genesis is 0
        timestamp: RFC 3339 UTC creation time
        transactions: Transactions committed by this block
        previous_hash: Hash of the preceding block, "0" for genesis
        hash: SHA-256 hex digest over the fields above and the shard id
        shard_id: Shard the block belongs to
    """

    index: int
    timestamp: str
    transactions: list[Transaction] = field(default_factory=list)
    previous_hash: str = GENESIS_PREVIOUS_HASH
    hash: str = ""
    shard_id: Optional[int] = None

    @classmethod
    def new(
        cls,
        index: int,
        transactions: list[Transaction],
        previous_hash: str,
        shard_id: Optional[int] = None,
        timestamp: Optional[str] = None,
    ) -> "Block":
        ts = timestamp or _utc_now()
        return cls(
            index=index,
            timestamp=ts,
            transactions=list(transactions),
            previous_hash=previous_hash,
            hash=calculate_hash(index, ts, transactions, previous_hash, shard_id),
            shard_id=shard_id,
        )

    @classmethod
    def genesis(cls, shard_id: Optional[int]) -> "Block":
        return cls.new(0, [], GENESIS_PREVIOUS_HASH, shard_id)

    def compute_hash(self) -> str:
        return calculate_hash(
            self.index, self.timestamp, self.transactions, self.previous_hash, self.shard_id
        )

    def verify_hash(self) -> bool:
        return self.hash == self.compute_hash()

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "timestamp": self.timestamp,
            "transactions": [tx.to_dict() for tx in self.transactions],
            "previous_hash": self.previous_hash,
            "hash": self.hash,
            "shard_id": self.shard_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Block":
        shard = data.get("shard_id")
        return cls(
            index=int(data["index"]),
            timestamp=data["timestamp"],
            transactions=[Transaction.from_dict(t) for t in data.get("transactions", [])],
            previous_hash=data["previous_hash"],
            hash=data["hash"],
            shard_id=int(shard) if shard is not None else None,
        )


__all__ = ["Block", "GENESIS_PREVIOUS_HASH", "calculate_hash", "canonical_transactions"]
