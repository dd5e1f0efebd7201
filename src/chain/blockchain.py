"""
Sharded ledger.

Each shard is an independent hash-linked list of blocks starting from its own
genesis block. Shard 0 is the lock shard and shard 1 the VPP shard; the
shard count is configurable. Nonces are single-use across the whole ledger.

Appending a block runs, in order: batch signature verification, nonce
checks, transaction validation, contract execution, shard lookup, and the
consensus check on the built block. Nothing is committed until every step
passes, so a rejected batch leaves the ledger untouched.
"""
from __future__ import annotations

import hashlib
import math
import threading
from typing import Iterable, Optional

from app_logging import get_logger
from consensus import Consensus, ProofOfStake
from contracts import DEFAULT_MIN_GAS, execute_wasm_contract
from exceptions import (
    ConsensusError,
    ContractExecutionError,
    DuplicateNonceError,
    InvalidShardError,
    InvalidTransactionError,
    SignatureVerificationError,
)
from metrics import record_batch_rejected, record_block_added
from models.block import GENESIS_PREVIOUS_HASH, Block
from models.transaction import Address, Transaction
from signing import VerifyingKey, verify_signature

LOCK_SHARD = 0
VPP_SHARD = 1
SHARD_NAMES = {LOCK_SHARD: "lock", VPP_SHARD: "vpp"}

logger = get_logger("crawchain.chain")


class Blockchain:
    """In-memory sharded ledger with validator stakes and registered public keys."""

    def __init__(
        self,
        shard_count: int = 2,
        consensus: Optional[Consensus] = None,
        *,
        run_contracts: bool = True,
        min_contract_gas: int = DEFAULT_MIN_GAS,
        genesis: bool = True,
    ):
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")
        self.shard_count = shard_count
        self.consensus = consensus or ProofOfStake()
        self.run_contracts = run_contracts
        self.min_contract_gas = min_contract_gas
        self.shards: list[list[Block]] = (
            [[Block.genesis(shard_id)] for shard_id in range(shard_count)]
            if genesis
            else [[] for _ in range(shard_count)]
        )
        self.validators: list[Address] = []
        self.stakes: dict[Address, float] = {}
        self.used_nonces: set[int] = set()
        self.public_keys: dict[Address, VerifyingKey] = {}
        self._lock = threading.RLock()

    # ----------------- Shards -----------------
    @property
    def lock_shard(self) -> list[Block]:
        return self.shard(LOCK_SHARD)

    @property
    def vpp_shard(self) -> list[Block]:
        return self.shard(VPP_SHARD)

    def _shard_ref(self, shard_id: int) -> list[Block]:
        if not isinstance(shard_id, int) or isinstance(shard_id, bool) or not 0 <= shard_id < self.shard_count:
            raise InvalidShardError(shard_id)
        return self.shards[shard_id]

    def shard(self, shard_id: int) -> list[Block]:
        """Copy of the block list of a shard."""
        with self._lock:
            return list(self._shard_ref(shard_id))

    def tip(self, shard_id: int) -> Block:
        with self._lock:
            return self._shard_ref(shard_id)[-1]

    def height(self, shard_id: int) -> int:
        return self.tip(shard_id).index

    def assign_shard(self, sender: str) -> int:
        digest = hashlib.sha256(sender.encode("utf-8")).digest()
        return digest[0] % self.shard_count

    # ----------------- Keys & stakes -----------------
    def register_public_key(self, address: Address, key: VerifyingKey) -> None:
        with self._lock:
            self.public_keys[address] = key
        logger.info("public_key_registered", extra={"address": address})

    def stake(self, address: Address, amount: float) -> float:
        """Add stake for a validator, registering it on first stake. Returns the new total."""
        if not math.isfinite(amount) or amount <= 0:
            raise ValueError(f"stake amount must be a positive number, got {amount}")
        with self._lock:
            if address not in self.validators:
                self.validators.append(address)
            self.stakes[address] = self.stakes.get(address, 0.0) + amount
            total = self.stakes[address]
        logger.info("stake_added", extra={"validator": address, "amount": amount, "total": total})
        return total

    def select_validator(self, shard_id: int) -> Optional[Address]:
        """Stake-weighted validator for the next block of a shard, seeded by the tip hash."""
        if not isinstance(self.consensus, ProofOfStake):
            return None
        with self._lock:
            seed = self._shard_ref(shard_id)[-1].hash
            return self.consensus.select_validator(dict(self.stakes), seed)

    def penalize(self, address: Address, fraction: float) -> float:
        if not isinstance(self.consensus, ProofOfStake):
            return 0.0
        with self._lock:
            return self.consensus.penalize(self.stakes, address, fraction)

    # ----------------- Validation -----------------
    def validate_nonce(self, nonce: int) -> bool:
        """Claim a nonce. Returns False if it was already used."""
        with self._lock:
            if nonce in self.used_nonces:
                return False
            self.used_nonces.add(nonce)
            return True

    def validate_transaction(self, transaction: Transaction) -> bool:
        amount = transaction.token.amount
        return transaction.gas_limit > 0 and math.isfinite(amount) and amount > 0.0

    def batch_verify_signatures(self, transactions: Iterable[Transaction]) -> bool:
        return self._first_unverified(transactions) is None

    def _first_unverified(self, transactions: Iterable[Transaction]) -> Optional[Transaction]:
        for tx in transactions:
            key = self.public_keys.get(tx.sender)
            if key is None or not verify_signature(key, tx.signing_message(), tx.signature):
                return tx
        return None

    def validate_shard(self, shard_id: int) -> bool:
        """Recompute every block hash of a shard and check the links between them."""
        blocks = self.shard(shard_id)
        if not blocks:
            return False
        genesis = blocks[0]
        if genesis.index != 0 or genesis.previous_hash != GENESIS_PREVIOUS_HASH or genesis.transactions:
            return False
        previous: Optional[Block] = None
        for block in blocks:
            if block.shard_id is not None and block.shard_id != shard_id:
                return False
            if not block.verify_hash():
                return False
            if previous is not None and (
                block.previous_hash != previous.hash or block.index != previous.index + 1
            ):
                return False
            previous = block
        return True

    def validate_chain(self) -> bool:
        return all(self.validate_shard(shard_id) for shard_id in range(self.shard_count))

    # ----------------- Append -----------------
    def add_block(self, transactions: list[Transaction], shard_id: int) -> Block:
        """
        Validate a batch and append it as a new block on ``shard_id``.

        Raises:
            SignatureVerificationError: unknown sender or bad signature
            DuplicateNonceError: nonce already used, or repeated in the batch
            InvalidTransactionError: zero gas, bad amount, or failed contract
            InvalidShardError: unknown shard id
            ConsensusError: consensus rejected the block
        """
        transactions = list(transactions)
        with self._lock:
            try:
                bad = self._first_unverified(transactions)
                if bad is not None:
                    raise SignatureVerificationError(bad.sender)

                seen: set[int] = set()
                for tx in transactions:
                    if tx.nonce in self.used_nonces or tx.nonce in seen:
                        raise DuplicateNonceError(tx.nonce)
                    seen.add(tx.nonce)
                    if not self.validate_transaction(tx):
                        raise InvalidTransactionError("Invalid transaction detected")

                if self.run_contracts:
                    for tx in transactions:
                        if tx.contract_code is None:
                            continue
                        try:
                            execute_wasm_contract(tx.contract_code, tx.gas_limit, min_gas=self.min_contract_gas)
                        except ContractExecutionError as e:
                            raise InvalidTransactionError(f"contract failed for nonce {tx.nonce}: {e}") from e

                shard = self._shard_ref(shard_id)
                last_block = shard[-1]
                new_block = Block.new(last_block.index + 1, transactions, last_block.hash, shard_id)
                if not self.consensus.validate_block(new_block):
                    raise ConsensusError(f"{self.consensus.name} consensus rejected block {new_block.index}")
            except (
                SignatureVerificationError,
                DuplicateNonceError,
                InvalidTransactionError,
                InvalidShardError,
                ConsensusError,
            ) as e:
                reason = type(e).__name__
                record_batch_rejected(reason)
                logger.warning("batch_rejected", extra={"reason": reason, "error": str(e), "shard": shard_id})
                raise

            self.used_nonces.update(seen)
            shard.append(new_block)

        record_block_added(shard_id, new_block.index, len(transactions))
        logger.info(
            "block_added",
            extra={"shard": shard_id, "index": new_block.index, "hash": new_block.hash, "txs": len(transactions)},
        )
        return new_block

    # ----------------- Summary -----------------
    def summary(self) -> list[dict]:
        with self._lock:
            return [
                {
                    "shard_id": shard_id,
                    "name": SHARD_NAMES.get(shard_id, f"shard-{shard_id}"),
                    "height": blocks[-1].index if blocks else -1,
                    "tip_hash": blocks[-1].hash if blocks else None,
                    "blocks": len(blocks),
                }
                for shard_id, blocks in enumerate(self.shards)
            ]


__all__ = ["Blockchain", "LOCK_SHARD", "VPP_SHARD", "SHARD_NAMES"]
