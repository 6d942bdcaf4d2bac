"""
Tests for claim stores.

Tests:
- JSON file store survives a reload
- Corrupt or unsupported state files are refused
- Failed writes and deletes leave memory unchanged
- Engines sharing one state file see each other's claims
- Store factory
"""

import json
import threading

import pytest

from core.claims.store import InMemoryClaimStore, JsonFileStore, create_store
from core.schemas.claims import ClaimRecord, Commitment, RejectionReason
from core.schemas.errors import StoreException

from fixtures import CONFIGURER, build_item_tree, make_addresses, make_engine


ROOT = "0x" + "aa" * 32


def _commitment(epoch=1, active=True):
    return Commitment(commitment_id=f"cm_{epoch}", root=ROOT, epoch=epoch, active=active)


class TestInMemoryStore:
    def test_insert_if_absent(self):
        store = InMemoryClaimStore()
        record = ClaimRecord(epoch=1, identity="a")
        assert store.insert_claim_if_absent(record)
        assert not store.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a"))
        assert store.get_claim(1, "a") == record

    def test_last_epoch(self):
        store = InMemoryClaimStore()
        assert store.last_epoch() == 0
        store.put_commitment(_commitment(1))
        store.put_commitment(_commitment(3))
        assert store.last_epoch() == 3

    def test_snapshot_shape(self):
        store = InMemoryClaimStore()
        store.put_commitment(_commitment(1))
        snap = store.snapshot()
        assert snap["format_version"] == "1.0"
        assert snap["commitments"][0]["root"] == ROOT
        assert snap["claims"] == []


class TestJsonFileStore:
    def test_reload(self, tmp_path):
        path = tmp_path / "state.json"
        store = JsonFileStore(path)
        store.put_commitment(_commitment(1))
        store.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a", commitment_id="cm_1"))

        reloaded = JsonFileStore(path)
        assert reloaded.get_commitment("cm_1").root == ROOT
        assert reloaded.get_claim(1, "a").commitment_id == "cm_1"
        assert reloaded.last_epoch() == 1

    def test_state_file_is_json(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        JsonFileStore(path).put_commitment(_commitment(2))
        data = json.loads(path.read_text())
        assert data["commitments"][0]["epoch"] == 2
        assert not list(path.parent.glob("*.tmp"))

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        with pytest.raises(StoreException):
            JsonFileStore(path)

    def test_unsupported_version(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"format_version": "9.9", "commitments": [], "claims": []}))
        with pytest.raises(StoreException):
            JsonFileStore(path)

    def test_invalid_entries(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({
            "format_version": "1.0",
            "commitments": [{"commitment_id": "cm_1", "root": "0x12", "epoch": 1}],
            "claims": [],
        }))
        with pytest.raises(StoreException):
            JsonFileStore(path)

    def test_failed_write_rolls_back(self, tmp_path, monkeypatch):
        store = JsonFileStore(tmp_path / "state.json")

        def fail():
            raise StoreException("disk full", retryable=True)

        monkeypatch.setattr(store, "_persist", fail)
        with pytest.raises(StoreException):
            store.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a"))
        assert store.get_claim(1, "a") is None
        with pytest.raises(StoreException):
            store.put_commitment(_commitment(1))
        assert store.get_commitment("cm_1") is None

    def test_failed_delete_keeps_record(self, tmp_path, monkeypatch):
        store = JsonFileStore(tmp_path / "state.json")
        store.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a"))

        def fail():
            raise StoreException("disk full", retryable=True)

        monkeypatch.setattr(store, "_persist", fail)
        with pytest.raises(StoreException):
            store.delete_claim(1, "a")
        assert store.get_claim(1, "a") is not None

    def test_in_memory_failed_delete_keeps_record(self, monkeypatch):
        store = InMemoryClaimStore()
        store.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a"))

        def fail():
            raise StoreException("disk full", retryable=True)

        monkeypatch.setattr(store, "_persist", fail)
        with pytest.raises(StoreException):
            store.delete_claim(1, "a")
        assert store.get_claim(1, "a") is not None

    def test_second_store_sees_later_writes(self, tmp_path):
        path = tmp_path / "state.json"
        first = JsonFileStore(path)
        second = JsonFileStore(path)

        first.put_commitment(_commitment(1))
        assert second.get_commitment("cm_1") is not None
        assert second.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a"))
        assert not first.insert_claim_if_absent(ClaimRecord(epoch=1, identity="a"))
        second.put_commitment(_commitment(2))

        data = json.loads(path.read_text())
        assert [c["epoch"] for c in data["commitments"]] == [1, 2]
        assert [r["identity"] for r in data["claims"]] == ["a"]


class TestSharedStateFile:
    @pytest.fixture
    def setup(self, tmp_path):
        path = tmp_path / "state.json"
        items = make_addresses(4)
        tree = build_item_tree(items)
        engines = [make_engine(store=JsonFileStore(path)) for _ in range(2)]
        cid = engines[0].create_commitment(tree.root, {"amount": 100}, caller=CONFIGURER)
        return path, items, tree, engines, cid

    def test_second_engine_rejects_repeat(self, setup):
        path, items, tree, (first, second), cid = setup

        assert first.submit(cid, items[0], tree.proof(0)).ok
        repeat = second.submit(cid, items[0], tree.proof(0))
        assert repeat.reason is RejectionReason.ALREADY_CLAIMED
        assert second.is_consumed(cid, items[0].identity())

    def test_claims_from_both_engines_kept(self, setup):
        path, items, tree, (first, second), cid = setup

        assert first.submit(cid, items[0], tree.proof(0)).ok
        assert second.submit(cid, items[1], tree.proof(1)).ok

        reopened = make_engine(store=JsonFileStore(path))
        assert reopened.is_consumed(cid, items[0].identity())
        assert reopened.is_consumed(cid, items[1].identity())

    def test_commitments_from_both_engines_get_distinct_epochs(self, setup):
        path, items, tree, (first, second), cid = setup

        other = second.create_commitment(tree.root, caller=CONFIGURER)
        third = first.create_commitment(tree.root, caller=CONFIGURER)
        assert [cid, other, third] == ["cm_1", "cm_2", "cm_3"]
        assert len(make_engine(store=JsonFileStore(path)).list_commitments()) == 3

    def test_concurrent_engines_single_winner(self, setup):
        path, items, tree, _, cid = setup
        engines = [make_engine(store=JsonFileStore(path)) for _ in range(8)]
        barrier = threading.Barrier(len(engines))
        results = []
        results_lock = threading.Lock()

        def worker(engine):
            barrier.wait()
            result = engine.submit(cid, items[2], tree.proof(2))
            with results_lock:
                results.append(result)

        threads = [threading.Thread(target=worker, args=(e,)) for e in engines]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r.ok) == 1
        assert all(
            r.reason is RejectionReason.ALREADY_CLAIMED for r in results if not r.ok
        )


class TestCreateStore:
    def test_memory(self):
        assert isinstance(create_store("memory"), InMemoryClaimStore)

    def test_file(self, tmp_path):
        assert isinstance(create_store("file", tmp_path / "s.json"), JsonFileStore)

    def test_file_without_path(self):
        with pytest.raises(StoreException):
            create_store("file")

    def test_unknown_backend(self):
        with pytest.raises(StoreException):
            create_store("redis")


class TestSchemaVersion:
    def test_unknown_schema_version_refused(self, tmp_path):
        path = tmp_path / "state.json"
        raw = _commitment(1).model_dump(mode="json")
        raw["schema_version"] = "v9"
        path.write_text(json.dumps({"format_version": "1.0", "commitments": [raw], "claims": []}))
        with pytest.raises(StoreException):
            JsonFileStore(path)
