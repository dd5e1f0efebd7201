from .blockchain import LOCK_SHARD, SHARD_NAMES, VPP_SHARD, Blockchain  # noqa: F401

__all__ = ["Blockchain", "LOCK_SHARD", "VPP_SHARD", "SHARD_NAMES"]
