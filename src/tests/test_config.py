from config import get_settings


def test_defaults(monkeypatch):
    for name in (
        "CRAWCHAIN_HOST",
        "CRAWCHAIN_PORT",
        "CRAWCHAIN_SHARD_COUNT",
        "CRAWCHAIN_MIN_CONTRACT_GAS",
        "CRAWCHAIN_RUN_CONTRACTS",
        "CRAWCHAIN_DATA_DIR",
        "CRAWCHAIN_CONSENSUS",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.host == "0.0.0.0"
    assert s.port == 8080
    assert s.shard_count == 2
    assert s.min_contract_gas == 500
    assert s.run_contracts is True
    assert s.snapshot_path is None
    assert s.cors_origins == ("*",)
    assert s.consensus == "pos"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CRAWCHAIN_PORT", "9000")
    monkeypatch.setenv("CRAWCHAIN_SHARD_COUNT", "4")
    monkeypatch.setenv("CRAWCHAIN_RUN_CONTRACTS", "no")
    monkeypatch.setenv("CRAWCHAIN_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CORS_ORIGINS", "http://a, http://b")
    monkeypatch.setenv("CRAWCHAIN_CONSENSUS", "pos")
    monkeypatch.setenv("CRAWCHAIN_JSON_LOGS", "true")
    monkeypatch.setenv("CRAWCHAIN_LOG_LEVEL", "debug")
    s = get_settings()
    assert s.port == 9000
    assert s.shard_count == 4
    assert s.run_contracts is False
    assert s.snapshot_path == str(tmp_path / "ledger.json")
    assert s.cors_origins == ("http://a", "http://b")
    assert s.consensus == "pos"
    assert s.json_logs is True
    assert s.log_level == "DEBUG"
