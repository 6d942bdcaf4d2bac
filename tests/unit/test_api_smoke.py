"""
Smoke tests for the HTTP API.

Tests:
- Health endpoint
- Commitment configure/read routes and their error mapping
- Claim route: authorized, repeated, invalid input
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core.crypto.hashing import to_hex
from core.schemas.claims import CandidateItem

from fixtures import CONFIGURER, make_addresses, make_engine
from fixtures.trees import build_item_tree


HEADERS = {"X-Configurer": CONFIGURER}


@pytest.fixture
def items():
    return make_addresses(4)


@pytest.fixture
def tree(items):
    return build_item_tree(items)


@pytest.fixture
def client():
    return TestClient(create_app(make_engine()))


@pytest.fixture
def commitment_id(client, tree):
    resp = client.post(
        "/commitments",
        json={"root": to_hex(tree.root), "metadata": {"amount": 100}},
        headers=HEADERS,
    )
    assert resp.status_code == 201
    return resp.json()["commitment"]["commitment_id"]


def _claim_body(commitment_id, item, proof):
    return {
        "commitment_id": commitment_id,
        "candidate": {"kind": item.kind.value, "value": item.value},
        "proof": [to_hex(p) for p in proof],
    }


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["service"] == "claimgate-api"
        assert body["hash_algorithm"] == "sha256"
        assert body["commitments"] == 0

    def test_health_counts_commitments(self, client, commitment_id):
        body = client.get("/").json()
        assert body["commitments"] == 1
        assert body["active_commitments"] == 1


class TestCommitmentRoutes:
    def test_create_and_get(self, client, tree, commitment_id):
        resp = client.get(f"/commitments/{commitment_id}")
        assert resp.status_code == 200
        body = resp.json()["commitment"]
        assert body["root"] == to_hex(tree.root)
        assert body["metadata"] == {"amount": 100}
        assert body["active"] is True

    def test_missing_configurer_header(self, client, tree):
        resp = client.post("/commitments", json={"root": to_hex(tree.root)})
        assert resp.status_code == 401

    def test_unauthorized_configurer(self, client, tree):
        resp = client.post(
            "/commitments",
            json={"root": to_hex(tree.root)},
            headers={"X-Configurer": "mallory"},
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "UNAUTHORIZED_CONFIGURER"

    def test_bad_root(self, client):
        resp = client.post("/commitments", json={"root": "0x1234"}, headers=HEADERS)
        assert resp.status_code == 422

    def test_unknown_commitment(self, client):
        resp = client.get("/commitments/cm_404")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "UNKNOWN_COMMITMENT"

    def test_deactivate_and_list(self, client, commitment_id):
        resp = client.post(
            f"/commitments/{commitment_id}/active", json={"active": False}, headers=HEADERS
        )
        assert resp.status_code == 200
        assert resp.json()["commitment"]["active"] is False
        assert client.get("/commitments", params={"active_only": True}).json()["commitments"] == []
        assert len(client.get("/commitments").json()["commitments"]) == 1


class TestClaimRoute:
    def test_claim_once(self, client, items, tree, commitment_id):
        body = _claim_body(commitment_id, items[0], tree.proof(0))

        first = client.post("/claims", json=body)
        assert first.status_code == 200
        assert first.json()["ok"] is True
        assert first.json()["metadata"] == {"amount": 100}

        second = client.post("/claims", json=body)
        assert second.status_code == 200
        assert second.json()["ok"] is False
        assert second.json()["reason"] == "ALREADY_CLAIMED"

        identity = items[0].identity()
        status = client.get(f"/commitments/{commitment_id}/claims/{identity}")
        assert status.json()["consumed"] is True

    def test_invalid_proof(self, client, items, tree, commitment_id):
        resp = client.post("/claims", json=_claim_body(commitment_id, items[0], tree.proof(1)))
        assert resp.json()["reason"] == "INVALID_PROOF"

    def test_unknown_commitment_claim(self, client, items, tree):
        resp = client.post("/claims", json=_claim_body("cm_404", items[0], tree.proof(0)))
        assert resp.status_code == 200
        assert resp.json()["reason"] == "UNKNOWN_COMMITMENT"

    @pytest.mark.parametrize("element", ["0xabcd", "not-hex", "0x" + "ab" * 33])
    def test_malformed_proof_element(self, client, items, commitment_id, element):
        body = _claim_body(commitment_id, items[0], [])
        body["proof"] = [element]
        resp = client.post("/claims", json=body)
        assert resp.status_code == 200
        assert resp.json()["reason"] == "INVALID_PROOF"
        assert resp.json()["details"]["proof_failure"] == "MALFORMED_DIGEST"

    def test_overlong_proof(self, client, items, commitment_id):
        body = _claim_body(commitment_id, items[0], [])
        body["proof"] = ["0x" + "11" * 32] * 300
        resp = client.post("/claims", json=body)
        assert resp.status_code == 200
        assert resp.json()["reason"] == "INVALID_PROOF"
        assert resp.json()["details"]["proof_failure"] == "PROOF_TOO_DEEP"

    def test_status_accepts_checksummed_address(self, client):
        items = [CandidateItem.address("0x" + "ab" * 20), *make_addresses(2)]
        tree = build_item_tree(items)
        commitment_id = client.post(
            "/commitments", json={"root": to_hex(tree.root)}, headers=HEADERS
        ).json()["commitment"]["commitment_id"]
        client.post("/claims", json=_claim_body(commitment_id, items[0], tree.proof(0)))

        mixed = "address:0x" + "aB" * 20
        status = client.get(f"/commitments/{commitment_id}/claims/{mixed}")
        assert status.json()["consumed"] is True

    def test_status_bad_identity(self, client, commitment_id):
        resp = client.get(f"/commitments/{commitment_id}/claims/address:nope")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "SCHEMA_VALIDATION_ERROR"

    def test_malformed_candidate(self, client, commitment_id):
        body = {
            "commitment_id": commitment_id,
            "candidate": {"kind": "address", "value": "nope"},
            "proof": [],
        }
        assert client.post("/claims", json=body).status_code == 422
