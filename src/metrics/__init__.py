"""Metrics module for ledger monitoring.

Usage:
    from metrics import record_block_added

    record_block_added(shard_id=0, index=1, tx_count=3)
"""

from .ledger_metrics import (
    # Counter metrics
    batches_rejected,
    blocks_added,
    build_info,
    contract_executions,
    # Update functions
    record_batch_rejected,
    record_block_added,
    record_contract_execution,
    registry,
    render_latest,
    # Gauge metrics
    shard_height,
    transactions_committed,
)

__all__ = [
    'registry',
    'build_info',

    # Counter metrics
    'blocks_added',
    'transactions_committed',
    'batches_rejected',
    'contract_executions',

    # Gauge metrics
    'shard_height',

    # Update functions
    'record_block_added',
    'record_batch_rejected',
    'record_contract_execution',
    'render_latest',
]
