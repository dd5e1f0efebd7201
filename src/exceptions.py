class CrawChainError(RuntimeError):
    """Base class for ledger errors."""


class SignatureVerificationError(CrawChainError):
    def __init__(self, sender: str, message: str = "batch signature verification failed"):  # noqa: D401
        super().__init__(f"[{sender}] {message}")
        self.sender = sender
        self.message = message


class DuplicateNonceError(CrawChainError):
    def __init__(self, nonce: int):
        super().__init__(f"Duplicate nonce detected: {nonce}")
        self.nonce = nonce


class InvalidTransactionError(CrawChainError):
    pass


class InvalidShardError(CrawChainError):
    def __init__(self, shard_id):
        super().__init__(f"Invalid shard ID: {shard_id}")
        self.shard_id = shard_id


class ConsensusError(CrawChainError):
    pass


class ContractExecutionError(CrawChainError):
    pass


class SnapshotError(CrawChainError):
    pass


__all__ = [
    "CrawChainError",
    "SignatureVerificationError",
    "DuplicateNonceError",
    "InvalidTransactionError",
    "InvalidShardError",
    "ConsensusError",
    "ContractExecutionError",
    "SnapshotError",
]
