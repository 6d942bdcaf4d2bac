"""
Tests for candidate items and leaf encoding.

Tests:
- Item normalization and identities
- Fixed per-kind byte layout
- Domain separation between leaves and internal nodes
"""

import pytest
from pydantic import ValidationError

from core.claims.encoding import KIND_BYTES, LEAF_DOMAIN_TAG, LeafEncoder, encode_candidate
from core.crypto.hashing import hash_sorted_pair, keccak256, sha256
from core.schemas.claims import CandidateItem, CandidateKind


ADDR = "0x" + "Ab" * 20


class TestCandidateItem:
    def test_address_is_lowercased(self):
        item = CandidateItem.address(ADDR)
        assert item.value == ADDR.lower()
        assert item.identity() == "address:" + ADDR.lower()

    def test_bad_address(self):
        with pytest.raises(ValidationError):
            CandidateItem.address("0x1234")

    def test_token_id_spellings_share_identity(self):
        a = CandidateItem.token_id(255)
        b = CandidateItem.token_id("255")
        c = CandidateItem.token_id("0xff")
        assert a == b == c
        assert a.identity() == "token_id:255"

    def test_token_id_range(self):
        with pytest.raises(ValidationError):
            CandidateItem.token_id(-1)
        with pytest.raises(ValidationError):
            CandidateItem.token_id(2**256)
        with pytest.raises(ValidationError):
            CandidateItem.token_id(True)

    def test_bytes32_accepts_raw_bytes(self):
        raw = b"\x11" * 32
        assert CandidateItem.bytes32(raw) == CandidateItem.bytes32("0x" + "11" * 32)

    def test_bytes32_wrong_length(self):
        with pytest.raises(ValidationError):
            CandidateItem.bytes32(b"\x11" * 31)

    def test_same_body_different_kind_differs(self):
        """A token id and a bytes32 with identical bodies stay distinct."""
        token = CandidateItem.token_id(1)
        raw = CandidateItem.bytes32((1).to_bytes(32, "big"))
        assert token.body() == raw.body()
        assert token.identity() != raw.identity()

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            CandidateItem(kind="address", value=ADDR, note="x")


class TestEncoding:
    def test_body_widths(self):
        assert len(CandidateItem.address(ADDR).body()) == 20
        assert len(CandidateItem.token_id(7).body()) == 32
        assert CandidateItem.token_id(7).body()[-1] == 7

    def test_encoding_layout(self):
        item = CandidateItem.address(ADDR)
        assert encode_candidate(item) == KIND_BYTES[CandidateKind.ADDRESS] + item.body()

    def test_leaf_is_hash_of_tagged_preimage(self):
        item = CandidateItem.token_id(42)
        encoder = LeafEncoder()
        assert encoder.encode(item) == sha256(LEAF_DOMAIN_TAG + b"\x02" + item.body())

    def test_encoding_is_deterministic(self):
        encoder = LeafEncoder()
        item = CandidateItem.address(ADDR)
        assert encoder.encode(item) == encoder.encode(CandidateItem.address(ADDR.lower()))

    def test_kind_changes_leaf(self):
        encoder = LeafEncoder()
        token = CandidateItem.token_id(1)
        raw = CandidateItem.bytes32((1).to_bytes(32, "big"))
        assert encoder.encode(token) != encoder.encode(raw)

    def test_hasher_is_configurable(self):
        item = CandidateItem.token_id(1)
        assert LeafEncoder(keccak256).encode(item) != LeafEncoder(sha256).encode(item)

    def test_encode_many(self):
        items = [CandidateItem.token_id(i) for i in range(3)]
        encoder = LeafEncoder()
        assert encoder.encode_many(items) == [encoder.encode(i) for i in items]


class TestDomainSeparation:
    def test_preimage_never_node_sized(self):
        encoder = LeafEncoder()
        for item in [
            CandidateItem.address(ADDR),
            CandidateItem.token_id(0),
            CandidateItem.bytes32(b"\x00" * 32),
        ]:
            assert len(encoder.preimage(item)) != 64
            assert encoder.preimage(item).startswith(LEAF_DOMAIN_TAG)

    def test_node_presented_as_bytes32_item(self):
        """Encoding an internal node as an item never reproduces that node."""
        encoder = LeafEncoder()
        a = encoder.encode(CandidateItem.token_id(1))
        b = encoder.encode(CandidateItem.token_id(2))
        node = hash_sorted_pair(a, b)
        assert encoder.encode(CandidateItem.bytes32(node)) != node
