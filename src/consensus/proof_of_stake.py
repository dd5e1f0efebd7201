"""
Proof of Stake consensus.

Validators are addresses holding stake. Block validation checks every
transaction carries a positive gas limit. Validator selection is stake
weighted and deterministic for a given seed (normally a block hash), and
misbehaving validators can be penalized by slashing a fraction of their
stake.
"""
from __future__ import annotations

import hashlib
from typing import Optional

from app_logging import get_logger
from models.block import Block

from .base import Consensus

logger = get_logger("crawchain.consensus.pos")


class ProofOfStake(Consensus):
    name = "pos"

    def __init__(self, min_stake: float = 0.0):
        """
        Args:
            min_stake: Validators holding less than this are ignored by selection
        """
        self.min_stake = min_stake

    def validate_block(self, block: Block) -> bool:
        return all(tx.gas_limit > 0 for tx in block.transactions)

    def select_validator(self, stakes: dict[str, float], seed: str) -> Optional[str]:
        """
        Pick a validator with probability proportional to stake.

        Args:
            stakes: Address to stake mapping
            seed: Deterministic seed, e.g. the tip hash of a shard

        Returns:
            The selected address, or None when nobody is eligible
        """
        eligible = sorted(
            (addr, amount) for addr, amount in stakes.items() if amount > 0 and amount >= self.min_stake
        )
        if not eligible:
            return None
        total = sum(amount for _, amount in eligible)
        digest = hashlib.sha256(seed.encode()).digest()
        # Map the first 8 digest bytes onto [0, total)
        point = int.from_bytes(digest[:8], "big") / 2**64 * total
        running = 0.0
        for addr, amount in eligible:
            running += amount
            if point < running:
                return addr
        return eligible[-1][0]

    def penalize(self, stakes: dict[str, float], address: str, fraction: float) -> float:
        """Slash ``fraction`` of a validator's stake in place and return the amount removed."""
        if not 0.0 <= fraction <= 1.0:
            raise ValueError(f"penalty fraction must be within [0, 1], got {fraction}")
        current = stakes.get(address, 0.0)
        slashed = current * fraction
        if slashed:
            stakes[address] = current - slashed
            logger.warning("validator_slashed", extra={"validator": address, "slashed": slashed})
        return slashed


__all__ = ["ProofOfStake"]
