"""
REST API routes for the sharded ledger.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request

from chain.blockchain import Blockchain
from contracts import execute_wasm_contract
from exceptions import (
    ConsensusError,
    ContractExecutionError,
    CrawChainError,
    DuplicateNonceError,
    InvalidShardError,
    InvalidTransactionError,
    SignatureVerificationError,
)
from models.schemas import (
    AddBlockRequest,
    BlockResponse,
    ContractRequest,
    RegisterKeyRequest,
    StakeRequest,
)
from signing import load_public_key, public_key_to_hex
from store import save_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["ledger"])

_STATUS_BY_ERROR = {
    SignatureVerificationError: 401,
    InvalidShardError: 404,
    DuplicateNonceError: 409,
    ConsensusError: 422,
    InvalidTransactionError: 400,
}


def get_chain(request: Request) -> Blockchain:
    return request.app.state.chain


def _status_for(error: CrawChainError) -> int:
    for cls, status in _STATUS_BY_ERROR.items():
        if isinstance(error, cls):
            return status
    return 400


def _persist(request: Request, chain: Blockchain) -> None:
    path = request.app.state.settings.snapshot_path
    if path:
        save_snapshot(chain, path)


@router.post("/keys", status_code=201)
def register_key(body: RegisterKeyRequest, request: Request, chain: Blockchain = Depends(get_chain)):
    """Register the public key used to verify a sender's signatures."""
    try:
        key = load_public_key(body.public_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid public key: {e}")
    chain.register_public_key(body.address, key)
    _persist(request, chain)
    return {"address": body.address, "public_key": public_key_to_hex(key)}


@router.post("/blocks", response_model=BlockResponse, status_code=201)
def add_block(body: AddBlockRequest, request: Request, chain: Blockchain = Depends(get_chain)):
    """
    Validate a transaction batch and append it as a block.

    The shard defaults to the one assigned to the first sender.
    """
    try:
        transactions = [tx.to_transaction() for tx in body.transactions]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Malformed transaction: {e}")

    if body.shard_id is not None:
        shard_id = body.shard_id
    elif transactions:
        shard_id = chain.assign_shard(transactions[0].sender)
    else:
        shard_id = 0

    try:
        block = chain.add_block(transactions, shard_id)
    except CrawChainError as e:
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    _persist(request, chain)
    return block.to_dict()


@router.get("/shards")
def list_shards(chain: Blockchain = Depends(get_chain)) -> Dict[str, Any]:
    shards = chain.summary()
    return {"shards": shards, "count": len(shards)}


@router.get("/shards/assign/{sender}")
def assign_shard(sender: str, chain: Blockchain = Depends(get_chain)):
    return {"sender": sender, "shard_id": chain.assign_shard(sender)}


@router.get("/shards/{shard_id}/blocks", response_model=List[BlockResponse])
def shard_blocks(shard_id: int, chain: Blockchain = Depends(get_chain)):
    try:
        return [b.to_dict() for b in chain.shard(shard_id)]
    except InvalidShardError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/shards/{shard_id}/validate")
def validate_shard(shard_id: int, chain: Blockchain = Depends(get_chain)):
    try:
        valid = chain.validate_shard(shard_id)
        height = chain.height(shard_id)
    except InvalidShardError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"shard_id": shard_id, "valid": valid, "height": height}


@router.post("/validators", status_code=201)
def stake(body: StakeRequest, request: Request, chain: Blockchain = Depends(get_chain)):
    try:
        total = chain.stake(body.address, body.amount)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _persist(request, chain)
    return {"address": body.address, "stake": total}


@router.get("/validators")
def list_validators(chain: Blockchain = Depends(get_chain)):
    with chain._lock:
        validators = [{"address": a, "stake": chain.stakes.get(a, 0.0)} for a in chain.validators]
    return {
        "validators": validators,
        "count": len(validators),
        "next": {str(s): chain.select_validator(s) for s in range(chain.shard_count)},
    }


@router.post("/contracts/execute")
def execute_contract(body: ContractRequest, chain: Blockchain = Depends(get_chain)):
    """Dry-run a WASM contract under a gas limit."""
    try:
        code = bytes.fromhex(body.wasm_hex)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"wasm_hex is not valid hex: {e}")
    try:
        execute_wasm_contract(code, body.gas_limit, min_gas=chain.min_contract_gas)
    except ContractExecutionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"ok": True, "gas_limit": body.gas_limit}
