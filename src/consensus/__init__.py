"""Consensus registry/factory."""
from __future__ import annotations

from .base import Consensus
from .proof_of_stake import ProofOfStake

_CONSENSUS: dict[str, type[Consensus]] = {
    ProofOfStake.name: ProofOfStake,
}


def get_consensus(name: str, **kwargs) -> Consensus:
    try:
        cls = _CONSENSUS[name.lower()]
    except KeyError as e:
        raise ValueError(f"Unknown consensus '{name}'") from e
    return cls(**kwargs)


__all__ = ["Consensus", "ProofOfStake", "get_consensus"]
