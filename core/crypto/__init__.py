"""
Core cryptographic utilities.

Module 02 provides the hash functions and hex helpers used by the
leaf encoder and the Merkle verifier.
"""
from .hashing import (
    DIGEST_SIZE,
    Hasher,
    sha256,
    keccak256,
    get_hasher,
    hash_sorted_pair,
    hash_canonical,
    to_hex,
    from_hex,
    digest_from_hex,
)

__all__ = [
    "DIGEST_SIZE",
    "Hasher",
    "sha256",
    "keccak256",
    "get_hasher",
    "hash_sorted_pair",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "digest_from_hex",
]
