"""
Ledger data models: tokens, transactions and blocks
"""

from .block import Block
from .transaction import Address, Token, TokenKind, Transaction, ZKProof

__all__ = ["Address", "Block", "Token", "TokenKind", "Transaction", "ZKProof"]
