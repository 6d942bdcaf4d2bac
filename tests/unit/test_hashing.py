"""
Tests for digest primitives.

Tests:
- Known SHA-256 and Keccak-256 vectors
- Hasher registry lookup
- Sorted-pair parent hashing is order independent
- Hex helpers
"""

import pytest

from core.crypto.hashing import (
    DIGEST_SIZE,
    digest_from_hex,
    from_hex,
    get_hasher,
    hash_canonical,
    hash_sorted_pair,
    keccak256,
    sha256,
    to_hex,
)
from core.schemas.errors import ConfigurationException


class TestHashFunctions:
    def test_sha256_known_vector(self):
        assert sha256(b"hello").hex() == (
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )

    def test_keccak256_empty_input(self):
        """Ethereum Keccak, not NIST SHA3-256."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_digest_size(self):
        assert len(sha256(b"x")) == DIGEST_SIZE
        assert len(keccak256(b"x")) == DIGEST_SIZE


class TestHasherRegistry:
    def test_lookup_is_case_insensitive(self):
        assert get_hasher("SHA256") is sha256
        assert get_hasher("keccak256") is keccak256

    def test_unknown_algorithm(self):
        with pytest.raises(ConfigurationException) as exc:
            get_hasher("md5")
        assert "sha256" in exc.value.details["supported"]


class TestSortedPair:
    def test_order_independent(self):
        a, b = sha256(b"a"), sha256(b"b")
        assert hash_sorted_pair(a, b) == hash_sorted_pair(b, a)

    def test_smaller_child_first(self):
        a, b = sha256(b"a"), sha256(b"b")
        lo, hi = sorted([a, b])
        assert hash_sorted_pair(a, b) == sha256(lo + hi)

    def test_uses_given_hasher(self):
        a, b = sha256(b"a"), sha256(b"b")
        assert hash_sorted_pair(a, b, keccak256) != hash_sorted_pair(a, b, sha256)


class TestCanonicalHash:
    def test_key_order_does_not_matter(self):
        assert hash_canonical({"a": 1, "b": 2}) == hash_canonical({"b": 2, "a": 1})


class TestHex:
    def test_round_trip(self):
        assert from_hex(to_hex(b"\xde\xad")) == b"\xde\xad"

    def test_requires_prefix(self):
        with pytest.raises(ValueError):
            from_hex("dead")

    def test_odd_length(self):
        with pytest.raises(ValueError):
            from_hex("0xabc")

    def test_digest_length_enforced(self):
        with pytest.raises(ValueError):
            digest_from_hex("0x" + "ab" * 31)
        assert digest_from_hex("0x" + "ab" * 32) == b"\xab" * 32
