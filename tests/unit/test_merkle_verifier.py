"""
Tests for Merkle proof verification.

Tests:
- Every leaf of a built tree verifies against its root
- Proofs do not verify against other roots or for other leaves
- A single flipped byte anywhere breaks the proof
- Sibling order inside a pair does not change the root
- Depth limit and digest length checks fail closed
"""

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from core.crypto.hashing import hash_sorted_pair, keccak256, sha256
from core.merkle.verifier import (
    DEFAULT_MAX_DEPTH,
    MerkleProof,
    MerkleVerifier,
    ProofFailure,
    compute_root,
    verify_merkle_proof,
)
from core.schemas.errors import ConfigurationException, MerkleVerificationException

from fixtures import build_tree


digests = st.binary(min_size=32, max_size=32)
leaf_lists = st.lists(digests, min_size=1, max_size=40, unique=True)


def _leaves(n):
    return [sha256(f"leaf-{i}".encode()) for i in range(n)]


class TestCompleteness:
    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 7, 8, 16, 33])
    def test_all_leaves_verify(self, n):
        tree = build_tree(_leaves(n))
        verifier = MerkleVerifier()
        for i, leaf in enumerate(tree.leaves):
            assert verifier.verify(leaf, tree.proof(i), tree.root)

    @settings(max_examples=50, deadline=None)
    @given(leaves=leaf_lists, data=st.data())
    def test_random_trees(self, leaves, data):
        tree = build_tree(leaves)
        index = data.draw(st.integers(min_value=0, max_value=len(leaves) - 1))
        assert verify_merkle_proof(tree.leaves[index], tree.proof(index), tree.root)

    def test_single_leaf_tree(self):
        leaf = sha256(b"only")
        assert compute_root(leaf, []) == leaf
        assert MerkleVerifier().verify(leaf, [], leaf)

    def test_keccak_tree(self):
        leaves = [keccak256(bytes([i])) for i in range(5)]
        tree = build_tree(leaves, keccak256)
        verifier = MerkleVerifier(hasher=keccak256)
        assert verifier.verify(leaves[3], tree.proof(3), tree.root)
        assert not MerkleVerifier(hasher=sha256).verify(leaves[3], tree.proof(3), tree.root)


class TestSoundness:
    def test_wrong_leaf(self):
        tree = build_tree(_leaves(4))
        outsider = sha256(b"outsider")
        assert not MerkleVerifier().verify(outsider, tree.proof(0), tree.root)

    def test_wrong_root(self):
        tree = build_tree(_leaves(4))
        other = build_tree(_leaves(5))
        assert not MerkleVerifier().verify(tree.leaves[1], tree.proof(1), other.root)

    def test_proof_for_other_index(self):
        tree = build_tree(_leaves(8))
        assert not MerkleVerifier().verify(tree.leaves[0], tree.proof(5), tree.root)

    def test_truncated_proof(self):
        tree = build_tree(_leaves(8))
        assert not MerkleVerifier().verify(tree.leaves[2], tree.proof(2)[:-1], tree.root)

    @settings(max_examples=50, deadline=None)
    @given(leaves=leaf_lists, outsider=digests)
    def test_non_member_has_no_proof(self, leaves, outsider):
        assume(outsider not in leaves)
        tree = build_tree(leaves)
        verifier = MerkleVerifier()
        for i in range(len(leaves)):
            assert not verifier.verify(outsider, tree.proof(i), tree.root)

    def test_mismatch_reason(self):
        tree = build_tree(_leaves(4))
        with pytest.raises(MerkleVerificationException) as exc:
            MerkleVerifier().check(sha256(b"x"), tree.proof(0), tree.root)
        assert exc.value.reason == ProofFailure.ROOT_MISMATCH.value


class TestTampering:
    """Flipping any one byte of leaf, sibling or root breaks the proof."""

    @staticmethod
    def _flip(digest, i):
        mutated = bytearray(digest)
        mutated[i] ^= 0x01
        return bytes(mutated)

    def test_leaf_bytes(self):
        tree = build_tree(_leaves(8))
        verifier = MerkleVerifier()
        for i in range(32):
            assert not verifier.verify(self._flip(tree.leaves[3], i), tree.proof(3), tree.root)

    def test_sibling_bytes(self):
        tree = build_tree(_leaves(8))
        proof = tree.proof(3)
        verifier = MerkleVerifier()
        for level in range(len(proof)):
            for i in (0, 15, 31):
                tampered = list(proof)
                tampered[level] = self._flip(proof[level], i)
                assert not verifier.verify(tree.leaves[3], tampered, tree.root)

    def test_root_bytes(self):
        tree = build_tree(_leaves(8))
        verifier = MerkleVerifier()
        for i in range(32):
            assert not verifier.verify(tree.leaves[3], tree.proof(3), self._flip(tree.root, i))


class TestOrderIndependence:
    def test_permuted_pairs_share_root(self):
        a, b, c, d = _leaves(4)
        roots = {
            build_tree([a, b, c, d]).root,
            build_tree([b, a, d, c]).root,
            build_tree([c, d, a, b]).root,
        }
        assert len(roots) == 1

    def test_proof_valid_across_permutations(self):
        a, b, c, d = _leaves(4)
        proof = build_tree([a, b, c, d]).proof(0)
        verifier = MerkleVerifier()
        for order in ([b, a, d, c], [c, d, a, b], [d, c, b, a]):
            assert verifier.verify(a, proof, build_tree(order).root)

    @given(a=digests, b=digests)
    def test_pair_hash_symmetric(self, a, b):
        assert hash_sorted_pair(a, b) == hash_sorted_pair(b, a)


class TestLimits:
    def test_default_depth(self):
        assert MerkleVerifier().max_depth == DEFAULT_MAX_DEPTH

    def test_too_deep_rejected_before_hashing(self):
        leaf = sha256(b"x")
        verifier = MerkleVerifier(max_depth=4)
        proof = [sha256(bytes([i])) for i in range(5)]
        root = verifier.compute_root(leaf, proof[:4])
        with pytest.raises(MerkleVerificationException) as exc:
            verifier.check(leaf, proof, root)
        assert exc.value.reason == ProofFailure.PROOF_TOO_DEEP.value

    def test_exact_depth_accepted(self):
        leaves = _leaves(16)
        tree = build_tree(leaves)
        assert MerkleVerifier(max_depth=4).verify(leaves[9], tree.proof(9), tree.root)
        assert not MerkleVerifier(max_depth=3).verify(leaves[9], tree.proof(9), tree.root)

    @pytest.mark.parametrize("bad", [b"", b"\x00" * 31, b"\x00" * 33])
    def test_malformed_sibling(self, bad):
        leaf = sha256(b"x")
        with pytest.raises(MerkleVerificationException) as exc:
            MerkleVerifier().check(leaf, [bad], leaf)
        assert exc.value.reason == ProofFailure.MALFORMED_DIGEST.value

    def test_malformed_root(self):
        leaf = sha256(b"x")
        assert not MerkleVerifier().verify(leaf, [], leaf[:16])

    @pytest.mark.parametrize("depth", [0, -1, 257])
    def test_invalid_depth_config(self, depth):
        with pytest.raises(ConfigurationException):
            MerkleVerifier(max_depth=depth)


class TestMerkleProof:
    def test_verify_proof_triple(self):
        tree = build_tree(_leaves(6))
        proof = MerkleProof(leaf=tree.leaves[4], siblings=tuple(tree.proof(4)), root=tree.root)
        assert proof.depth == 3
        assert MerkleVerifier().verify_proof(proof)
