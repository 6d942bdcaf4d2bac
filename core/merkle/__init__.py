"""
Module 02 - Merkle Commitments
Canonical sorted-pair Merkle proof verification.

Rules:
1. Parent hashing: H(min(a, b) || max(a, b))
2. Leaves are domain separated before they reach this module
3. Empty proof: leaf must equal root
4. Proofs deeper than the configured maximum fail closed

Usage:
    from core.merkle import MerkleVerifier
    
    verifier = MerkleVerifier(max_depth=32)
    assert verifier.verify(leaf, siblings, root)
"""
from .verifier import (
    DEFAULT_MAX_DEPTH,
    MAX_SUPPORTED_DEPTH,
    MerkleProof,
    MerkleVerifier,
    ProofFailure,
    compute_root,
    verify_merkle_proof,
)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "MAX_SUPPORTED_DEPTH",
    "MerkleProof",
    "MerkleVerifier",
    "ProofFailure",
    "compute_root",
    "verify_merkle_proof",
]
