"""Consensus interface consulted before a block is appended."""
from __future__ import annotations

from abc import ABC, abstractmethod

from models.block import Block


class Consensus(ABC):
    name: str = "base"

    @abstractmethod
    def validate_block(self, block: Block) -> bool:
        """Return True when the block may be appended to its shard."""


__all__ = ["Consensus"]
