import json
import threading

import pytest

import store
from exceptions import DuplicateNonceError, SnapshotError
from store import SNAPSHOT_VERSION, load_snapshot, save_snapshot


@pytest.fixture
def populated(chain, make_tx):
    chain.add_block([make_tx(nonce=1)], 0)
    chain.add_block([make_tx(sender="Bob", receiver="Alice", nonce=2)], 1)
    chain.stake("v1", 12.5)
    return chain


def test_missing_snapshot_returns_none(tmp_path):
    assert load_snapshot(str(tmp_path / "nope.json")) is None


def test_round_trip(populated, make_tx, tmp_path):
    path = str(tmp_path / "data" / "ledger.json")
    save_snapshot(populated, path)

    restored = load_snapshot(path)
    assert restored is not None
    assert restored.shard_count == populated.shard_count
    assert [b.hash for b in restored.shard(0)] == [b.hash for b in populated.shard(0)]
    assert [b.hash for b in restored.shard(1)] == [b.hash for b in populated.shard(1)]
    assert restored.used_nonces == {1, 2}
    assert restored.stakes == {"v1": 12.5}
    assert restored.validators == ["v1"]
    assert set(restored.public_keys) == {"Alice", "Bob"}
    assert restored.validate_chain()

    # Restored state still enforces nonces and verifies signatures
    with pytest.raises(DuplicateNonceError):
        restored.add_block([make_tx(nonce=1)], 0)
    block = restored.add_block([make_tx(nonce=3)], 0)
    assert block.previous_hash == populated.tip(0).hash


def test_tampered_snapshot_rejected(populated, tmp_path):
    path = tmp_path / "ledger.json"
    save_snapshot(populated, str(path))
    data = json.loads(path.read_text())
    data["shards"][0][1]["transactions"][0]["token"]["amount"] = 1e9
    path.write_text(json.dumps(data))
    with pytest.raises(SnapshotError, match="integrity"):
        load_snapshot(str(path))


def test_corrupt_json_rejected(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{not json")
    with pytest.raises(SnapshotError, match="corrupt"):
        load_snapshot(str(path))


def test_unknown_version_rejected(populated, tmp_path):
    path = tmp_path / "ledger.json"
    save_snapshot(populated, str(path))
    data = json.loads(path.read_text())
    data["version"] = SNAPSHOT_VERSION + 1
    path.write_text(json.dumps(data))
    with pytest.raises(SnapshotError, match="version"):
        load_snapshot(str(path))


def test_shard_count_mismatch_rejected(populated, tmp_path):
    path = tmp_path / "ledger.json"
    save_snapshot(populated, str(path))
    data = json.loads(path.read_text())
    data["shard_count"] = 3
    path.write_text(json.dumps(data))
    with pytest.raises(SnapshotError):
        load_snapshot(str(path))


@pytest.mark.parametrize(
    "raw",
    [
        b"[]",
        b'"ledger"',
        b'{"x": "\xff\xfe"}',
    ],
)
def test_unreadable_documents_rejected(tmp_path, raw):
    path = tmp_path / "ledger.json"
    path.write_bytes(raw)
    with pytest.raises(SnapshotError):
        load_snapshot(str(path))


def test_non_object_blocks_rejected(populated, tmp_path):
    path = tmp_path / "ledger.json"
    save_snapshot(populated, str(path))
    data = json.loads(path.read_text())
    data["shards"] = [[1], [2]]
    path.write_text(json.dumps(data))
    with pytest.raises(SnapshotError, match="malformed"):
        load_snapshot(str(path))


def test_snapshot_without_genesis_rejected(populated, tmp_path):
    path = tmp_path / "ledger.json"
    save_snapshot(populated, str(path))
    data = json.loads(path.read_text())
    data["shards"][0] = data["shards"][0][1:]
    path.write_text(json.dumps(data))
    with pytest.raises(SnapshotError, match="integrity"):
        load_snapshot(str(path))


def test_stale_save_cannot_overwrite_newer_state(chain, make_tx, monkeypatch, tmp_path):
    path = str(tmp_path / "ledger.json")
    built = threading.Event()
    writer_done = threading.Event()
    original = store.snapshot_to_dict
    calls = []

    def slow_snapshot(c):
        payload = original(c)
        calls.append(len(calls))
        if len(calls) == 1:
            built.set()
            # Give the other writer a chance to commit and save in between
            writer_done.wait(timeout=1.0)
        return payload

    monkeypatch.setattr(store, "snapshot_to_dict", slow_snapshot)

    def append_and_save():
        built.wait(timeout=5.0)
        chain.add_block([make_tx(nonce=1)], 0)
        save_snapshot(chain, path)
        writer_done.set()

    writer = threading.Thread(target=append_and_save)
    writer.start()
    save_snapshot(chain, path)
    writer.join(timeout=10.0)

    restored = load_snapshot(path)
    assert restored is not None
    assert restored.height(0) == chain.height(0) == 1
