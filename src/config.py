import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class _Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    shard_count: int = 2
    min_contract_gas: int = 500
    run_contracts: bool = True
    data_dir: str | None = None
    json_logs: bool = False
    log_level: str = "INFO"
    consensus: str = "pos"
    cors_origins: tuple[str, ...] = ("*",)

    @property
    def snapshot_path(self) -> str | None:
        if not self.data_dir:
            return None
        return os.path.join(self.data_dir, "ledger.json")


def get_settings() -> _Settings:
    return _Settings(
        host=os.getenv("CRAWCHAIN_HOST", "0.0.0.0"),
        port=int(os.getenv("CRAWCHAIN_PORT", "8080")),
        shard_count=int(os.getenv("CRAWCHAIN_SHARD_COUNT", "2")),
        min_contract_gas=int(os.getenv("CRAWCHAIN_MIN_CONTRACT_GAS", "500")),
        run_contracts=_env_flag("CRAWCHAIN_RUN_CONTRACTS", "1"),
        data_dir=os.getenv("CRAWCHAIN_DATA_DIR") or None,
        json_logs=_env_flag("CRAWCHAIN_JSON_LOGS", "0"),
        log_level=os.getenv("CRAWCHAIN_LOG_LEVEL", "INFO").upper(),
        consensus=os.getenv("CRAWCHAIN_CONSENSUS", "pos"),
        cors_origins=tuple(o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()),
    )

__all__ = ["get_settings", "_Settings"]
