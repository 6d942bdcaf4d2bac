"""
Module 02 - Hashing Utilities
Digest primitives shared by leaf encoding and Merkle verification.

This module provides:
- SHA-256 and Keccak-256 over raw bytes
- A named hasher registry ("sha256", "keccak256")
- The canonical sorted-pair node hash
- Canonical hashing for objects (via dumps_canonical)
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Every digest handled by the claim engine is exactly 32 bytes
- Internal nodes hash the two children in ascending byte order, so the
  parent of an unordered pair does not depend on which side a prover put
  each child
- Keccak-256 roots are compatible with OpenZeppelin's MerkleProof when the
  leaves are built the same way
"""
from __future__ import annotations

import hashlib
from typing import Any, Callable

from eth_utils import keccak

from core.schemas.canonical import dumps_canonical
from core.schemas.errors import ConfigurationException


DIGEST_SIZE = 32

Hasher = Callable[[bytes], bytes]


def sha256(data: bytes) -> bytes:
    """SHA-256 of raw bytes; the default hash for leaves and nodes."""
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """Compute the Ethereum flavour of Keccak-256 (not NIST SHA3-256)."""
    return bytes(keccak(data))


HASHERS: dict[str, Hasher] = {
    "sha256": sha256,
    "keccak256": keccak256,
}


def get_hasher(name: str) -> Hasher:
    """
    Look up a hash function by its configured name.
    
    Args:
        name: "sha256" or "keccak256" (case-insensitive)
        
    Returns:
        The hash function
        
    Raises:
        ConfigurationException: If the name is not a known algorithm
    """
    try:
        return HASHERS[name.lower()]
    except KeyError:
        raise ConfigurationException(
            f"Unknown hash algorithm: {name!r}",
            details={"supported": sorted(HASHERS)},
        ) from None


def hash_sorted_pair(a: bytes, b: bytes, hasher: Hasher = sha256) -> bytes:
    """
    Hash two sibling digests in canonical order.
    
    parent = H(min(a, b) || max(a, b))
    
    Bytewise comparison of equal-length digests is the same as comparing
    them as big-endian unsigned integers, which is what on-chain verifiers
    do with bytes32 values.
    
    Args:
        a: One child digest
        b: The other child digest
        hasher: Hash function to apply
        
    Returns:
        32-byte parent digest
    """
    if a <= b:
        return hasher(a + b)
    return hasher(b + a)


def hash_canonical(obj: Any, hasher: Hasher = sha256) -> bytes:
    """
    Hash an object using canonical JSON serialization.
    
    Used to fingerprint commitment metadata; the result is independent of
    dict insertion order.
    
    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return hasher(canonical_json.encode("utf-8"))


def to_hex(data: bytes) -> str:
    """Lowercase hex with a 0x prefix, the wire form of every digest."""
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Decode 0x-prefixed hex. Upper- and lowercase digits are both accepted.
    
    Raises:
        ValueError: Missing prefix, odd digit count, or non-hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(f"Expected 0x-prefixed hex, got {hex_string[:10]!r}")
    digits = hex_string[2:]
    if len(digits) % 2:
        raise ValueError(f"Odd number of hex digits ({len(digits)})")
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValueError(f"Not valid hex: {e}") from e


def digest_from_hex(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed hex string that must hold exactly one digest.
    
    Raises:
        ValueError: If the string is not valid hex or not 32 bytes long
    """
    data = from_hex(hex_string)
    if len(data) != DIGEST_SIZE:
        raise ValueError(
            f"Digest must be {DIGEST_SIZE} bytes, got {len(data)}"
        )
    return data


__all__ = [
    "DIGEST_SIZE",
    "Hasher",
    "HASHERS",
    "sha256",
    "keccak256",
    "get_hasher",
    "hash_sorted_pair",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "digest_from_hex",
]
