"""Prometheus metrics for the ledger.

Exposes:
- crawchain_blocks_added_total: Blocks appended, by shard
- crawchain_transactions_committed_total: Transactions committed, by shard
- crawchain_batches_rejected_total: Rejected batches, by reason
- crawchain_shard_height: Index of the tip block, by shard
- crawchain_contract_executions_total: WASM contract runs, by outcome
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

registry = CollectorRegistry()

build_info = Gauge(
    'crawchain_build_info',
    'Build information',
    ['service', 'version'],
    registry=registry,
)

# ============================================================================
# Counter Metrics
# ============================================================================

blocks_added = Counter(
    'crawchain_blocks_added_total',
    'Blocks appended to a shard',
    ['shard'],
    registry=registry,
)

transactions_committed = Counter(
    'crawchain_transactions_committed_total',
    'Transactions committed in appended blocks',
    ['shard'],
    registry=registry,
)

batches_rejected = Counter(
    'crawchain_batches_rejected_total',
    'Transaction batches rejected before append',
    ['reason'],
    registry=registry,
)

contract_executions = Counter(
    'crawchain_contract_executions_total',
    'WASM contract executions',
    ['outcome'],
    registry=registry,
)

# ============================================================================
# Gauge Metrics
# ============================================================================

shard_height = Gauge(
    'crawchain_shard_height',
    'Index of the tip block of a shard',
    ['shard'],
    registry=registry,
)


def record_block_added(shard_id: int, index: int, tx_count: int) -> None:
    shard = str(shard_id)
    blocks_added.labels(shard=shard).inc()
    transactions_committed.labels(shard=shard).inc(tx_count)
    shard_height.labels(shard=shard).set(index)


def record_batch_rejected(reason: str) -> None:
    batches_rejected.labels(reason=reason).inc()


def record_contract_execution(outcome: str) -> None:
    contract_executions.labels(outcome=outcome).inc()


def render_latest() -> str:
    return generate_latest(registry).decode("utf-8")
