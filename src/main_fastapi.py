"""
CrawChain - FastAPI Application

Serves the sharded ledger over HTTP. ``create_app`` builds an application
around a given chain (tests) or around one restored from the configured
snapshot directory.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from api.routes.ledger import router as ledger_router
from app_logging import get_logger, init_logging
from chain.blockchain import Blockchain
from config import _Settings, get_settings
from consensus import get_consensus
from metrics import build_info, render_latest
from models.schemas import HealthResponse
from store import load_snapshot

VERSION = "0.1.0"

logger = get_logger(__name__)


def _build_chain(settings: _Settings) -> Blockchain:
    consensus = get_consensus(settings.consensus)
    if settings.snapshot_path:
        restored = load_snapshot(settings.snapshot_path)
        if restored is not None:
            restored.consensus = consensus
            return restored
    return Blockchain(
        shard_count=settings.shard_count,
        consensus=consensus,
        run_contracts=settings.run_contracts,
        min_contract_gas=settings.min_contract_gas,
    )


def create_app(settings: Optional[_Settings] = None, chain: Optional[Blockchain] = None) -> FastAPI:
    settings = settings or get_settings()
    init_logging(force=True, json_logs=settings.json_logs, level=settings.log_level)

    app = FastAPI(
        title="CrawChain",
        description="Sharded ledger with signed transactions, proof of stake and WASM contracts",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.chain = chain if chain is not None else _build_chain(settings)
    app.state.info = {
        "name": "crawchain",
        "version": VERSION,
        "description": "CrawChain sharded ledger",
        "status": "healthy",
        "started_at": datetime.now(timezone.utc).isoformat(),
        "shard_count": app.state.chain.shard_count,
    }

    app.include_router(ledger_router)
    build_info.labels(service="crawchain", version=VERSION).set(1)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat(), version=VERSION)

    @app.get("/info", response_class=JSONResponse)
    async def info():
        return app.state.info

    @app.get("/metrics", response_class=PlainTextResponse)
    async def metrics():
        return PlainTextResponse(render_latest())

    logger.info("app_created", extra={"shards": app.state.chain.shard_count, "port": settings.port})
    return app


def run(settings: Optional[_Settings] = None) -> None:
    import uvicorn

    settings = settings or get_settings()
    logger.info(f"Starting CrawChain on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
