"""
Module 02 - Merkle Proof Verification
Recompute a root from a leaf and an ordered sibling proof.

This module provides:
- MerkleProof: a (leaf, siblings, root) triple
- compute_root: fold a proof with the canonical sorted-pair hash
- verify_merkle_proof: bool check against a root
- MerkleVerifier: the same, bound to a hash function and maximum depth

Canonical Verification Rules (Hard Contracts):
1. Parent hashing: parent = H(min(a, b) || max(a, b))
   - Children are ordered by value, never by a position the prover chooses
2. Fold left to right: current = leaf; current = parent(current, sibling)
3. Empty proof: valid only when leaf == root (single-leaf tree)
4. Proofs longer than the configured maximum depth are rejected, not truncated
5. Every leaf, sibling and root is exactly 32 bytes

Tree construction is not part of this module. Trees are built off-line by
the committing party with the same pair hash and domain-separated leaves
(see core.claims.encoding).
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from core.crypto.hashing import DIGEST_SIZE, Hasher, hash_sorted_pair, sha256
from core.schemas.errors import ConfigurationException, MerkleVerificationException


logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

# Largest depth accepted from configuration; 2**256 leaves is already absurd
MAX_SUPPORTED_DEPTH = 256


class ProofFailure(str, Enum):
    """Reason a proof did not verify."""

    PROOF_TOO_DEEP = "PROOF_TOO_DEEP"
    MALFORMED_DIGEST = "MALFORMED_DIGEST"
    ROOT_MISMATCH = "ROOT_MISMATCH"


@dataclass(frozen=True)
class MerkleProof:
    """
    An inclusion proof for a single leaf.
    
    Attributes:
        leaf: The leaf digest being proven
        siblings: Sibling digests from the bottom of the tree to the top
        root: The Merkle root this proof is against
    """
    leaf: bytes
    siblings: tuple[bytes, ...]
    root: bytes
    
    @property
    def depth(self) -> int:
        return len(self.siblings)


def _require_digest(value: bytes, what: str) -> None:
    if not isinstance(value, (bytes, bytearray)) or len(value) != DIGEST_SIZE:
        raise MerkleVerificationException(
            f"{what} must be a {DIGEST_SIZE}-byte digest",
            reason=ProofFailure.MALFORMED_DIGEST.value,
            details={"field": what},
        )


def compute_root(
    leaf: bytes,
    siblings: Sequence[bytes],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    hasher: Hasher = sha256,
) -> bytes:
    """
    Fold a proof into the root it implies.
    
    Args:
        leaf: Leaf digest
        siblings: Sibling digests, bottom-up
        max_depth: Longest proof accepted
        hasher: Hash function used for parents
        
    Returns:
        The 32-byte root recomputed from the leaf
        
    Raises:
        MerkleVerificationException: If the proof is too long or any
            element is not a 32-byte digest
    """
    if len(siblings) > max_depth:
        raise MerkleVerificationException(
            f"Proof has {len(siblings)} siblings, maximum depth is {max_depth}",
            reason=ProofFailure.PROOF_TOO_DEEP.value,
            details={"depth": len(siblings), "max_depth": max_depth},
        )
    _require_digest(leaf, "leaf")
    
    current = bytes(leaf)
    for i, sibling in enumerate(siblings):
        _require_digest(sibling, f"siblings[{i}]")
        current = hash_sorted_pair(current, bytes(sibling), hasher)
    return current


def verify_merkle_proof(
    leaf: bytes,
    siblings: Sequence[bytes],
    root: bytes,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    hasher: Hasher = sha256,
) -> bool:
    """
    Verify that `leaf` is committed to by `root`.
    
    Returns:
        True if the proof folds to the root, False for any failure
        (mismatch, over-long proof, malformed digest)
    """
    try:
        _check(leaf, siblings, root, max_depth=max_depth, hasher=hasher)
    except MerkleVerificationException:
        return False
    return True


def _check(
    leaf: bytes,
    siblings: Sequence[bytes],
    root: bytes,
    *,
    max_depth: int,
    hasher: Hasher,
) -> None:
    _require_digest(root, "root")
    computed = compute_root(leaf, siblings, max_depth=max_depth, hasher=hasher)
    if not hmac.compare_digest(computed, bytes(root)):
        raise MerkleVerificationException(
            "Proof does not fold to the committed root",
            reason=ProofFailure.ROOT_MISMATCH.value,
            details={"depth": len(siblings)},
        )


class MerkleVerifier:
    """
    Stateless proof verifier bound to a hash function and a depth limit.
    
    Example:
        >>> verifier = MerkleVerifier(max_depth=20)
        >>> verifier.verify(leaf, [sibling_1, sibling_2], root)
        True
    """
    
    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        hasher: Hasher = sha256,
    ) -> None:
        if not 0 < max_depth <= MAX_SUPPORTED_DEPTH:
            raise ConfigurationException(
                f"max_depth must be in 1..{MAX_SUPPORTED_DEPTH}, got {max_depth}",
            )
        self.max_depth = max_depth
        self.hasher = hasher
    
    def compute_root(self, leaf: bytes, proof: Sequence[bytes]) -> bytes:
        """Fold `proof` over `leaf` (see module-level compute_root)."""
        return compute_root(leaf, proof, max_depth=self.max_depth, hasher=self.hasher)
    
    def check(self, leaf: bytes, proof: Sequence[bytes], root: bytes) -> None:
        """
        Verify a proof, raising with a reason on failure.
        
        Raises:
            MerkleVerificationException: details["reason"] is a ProofFailure value
        """
        _check(leaf, proof, root, max_depth=self.max_depth, hasher=self.hasher)
    
    def verify(self, leaf: bytes, proof: Sequence[bytes], root: bytes) -> bool:
        """Return True iff the proof folds `leaf` to `root`."""
        try:
            self.check(leaf, proof, root)
        except MerkleVerificationException as e:
            logger.debug("Proof rejected: %s", e.reason)
            return False
        return True
    
    def verify_proof(self, proof: MerkleProof) -> bool:
        """Verify a MerkleProof triple."""
        return self.verify(proof.leaf, proof.siblings, proof.root)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "MAX_SUPPORTED_DEPTH",
    "ProofFailure",
    "MerkleProof",
    "compute_root",
    "verify_merkle_proof",
    "MerkleVerifier",
]
