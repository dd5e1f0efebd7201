"""
JSON snapshot storage for ledger state.

Layout of a snapshot document:
  - version: format version (1)
  - shard_count, run_contracts, min_contract_gas
  - shards: list of block lists, each block as ``Block.to_dict()``
  - validators, stakes
  - used_nonces: sorted list of consumed nonces
  - public_keys: address -> PEM

Writes are atomic (temp file + rename) and serialized with an exclusive
``fcntl`` lock on a sidecar lock file.
"""
from __future__ import annotations

import fcntl
import json
import os
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from loguru import logger

from chain.blockchain import Blockchain
from exceptions import SnapshotError
from models.block import Block
from signing import load_public_key, public_key_to_pem

SNAPSHOT_VERSION = 1


@contextmanager
def _locked(path: str) -> Iterator[None]:
    with open(path + ".lock", "a+", encoding="utf-8") as fh:
        fcntl.flock(fh, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fh, fcntl.LOCK_UN)


def snapshot_to_dict(chain: Blockchain) -> dict[str, Any]:
    with chain._lock:
        return {
            "version": SNAPSHOT_VERSION,
            "shard_count": chain.shard_count,
            "run_contracts": chain.run_contracts,
            "min_contract_gas": chain.min_contract_gas,
            "shards": [[b.to_dict() for b in blocks] for blocks in chain.shards],
            "validators": list(chain.validators),
            "stakes": dict(chain.stakes),
            "used_nonces": sorted(chain.used_nonces),
            "public_keys": {addr: public_key_to_pem(key) for addr, key in chain.public_keys.items()},
        }


def chain_from_dict(data: dict[str, Any]) -> Blockchain:
    """Rebuild a chain from a snapshot document.

    Raises:
        SnapshotError: on unknown versions, malformed content, or shards whose
            hashes no longer verify.
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"malformed snapshot: expected an object, got {type(data).__name__}")
    if data.get("version") != SNAPSHOT_VERSION:
        raise SnapshotError(f"unsupported snapshot version: {data.get('version')!r}")
    try:
        chain = Blockchain(
            shard_count=int(data["shard_count"]),
            run_contracts=bool(data.get("run_contracts", True)),
            min_contract_gas=int(data.get("min_contract_gas", 500)),
            genesis=False,
        )
        shards = data["shards"]
        if len(shards) != chain.shard_count:
            raise SnapshotError(f"expected {chain.shard_count} shards, found {len(shards)}")
        chain.shards = [[Block.from_dict(b) for b in blocks] for blocks in shards]
        chain.validators = list(data.get("validators", []))
        chain.stakes = {k: float(v) for k, v in data.get("stakes", {}).items()}
        chain.used_nonces = {int(n) for n in data.get("used_nonces", [])}
        chain.public_keys = {addr: load_public_key(pem) for addr, pem in data.get("public_keys", {}).items()}
    except SnapshotError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"malformed snapshot: {e}") from e
    for shard_id in range(chain.shard_count):
        if not chain.validate_shard(shard_id):
            raise SnapshotError(f"shard {shard_id} failed integrity validation")
    return chain


def save_snapshot(chain: Blockchain, path: str) -> None:
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    tmp = path + ".tmp"
    # Hold the chain lock through the write so a stale payload never lands after a newer one
    with chain._lock, _locked(path):
        payload = snapshot_to_dict(chain)
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    logger.debug(f"snapshot saved to {path}")


def load_snapshot(path: str) -> Optional[Blockchain]:
    """Load a chain from ``path``; ``None`` when no snapshot exists yet."""
    if not os.path.exists(path):
        return None
    with _locked(path):
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SnapshotError(f"corrupt snapshot {path}: {e}") from e
    chain = chain_from_dict(data)
    logger.info(f"snapshot loaded from {path} ({sum(len(s) for s in chain.shards)} blocks)")
    return chain


__all__ = ["save_snapshot", "load_snapshot", "snapshot_to_dict", "chain_from_dict", "SNAPSHOT_VERSION"]
