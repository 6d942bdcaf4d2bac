"""
Module 03 - Leaf Encoding

Maps a CandidateItem to the leaf digest committed in a Merkle tree.

    leaf = H(LEAF_DOMAIN_TAG || kind_byte || body)

The encoding is fixed once for each kind and never chosen per call:

    kind       kind_byte  body
    address    0x01       20 raw address bytes
    token_id   0x02       32-byte big-endian unsigned integer
    bytes32    0x03       32 raw bytes

Every leaf preimage starts with the 18-byte tag and is 39 or 51 bytes long,
while every internal-node preimage is exactly 64 bytes (two digests). No leaf
preimage can therefore equal an internal-node preimage, so a node digest
presented as a raw item is re-hashed under the tag and never lands on itself.
"""

from __future__ import annotations

from typing import Iterable

from core.crypto.hashing import Hasher, sha256
from core.schemas.claims import CandidateItem, CandidateKind


LEAF_DOMAIN_TAG: bytes = b"claimgate:leaf:v1\x00"

KIND_BYTES: dict[CandidateKind, bytes] = {
    CandidateKind.ADDRESS: b"\x01",
    CandidateKind.TOKEN_ID: b"\x02",
    CandidateKind.BYTES32: b"\x03",
}


def encode_candidate(item: CandidateItem) -> bytes:
    """Canonical byte encoding of an item, without the domain tag."""
    return KIND_BYTES[item.kind] + item.body()


class LeafEncoder:
    """
    Pure function object from candidate item to leaf digest.

    The hasher must match the one the tree was built with.
    """

    def __init__(self, hasher: Hasher = sha256) -> None:
        self.hasher = hasher

    def preimage(self, item: CandidateItem) -> bytes:
        return LEAF_DOMAIN_TAG + encode_candidate(item)

    def encode(self, item: CandidateItem) -> bytes:
        """Return the 32-byte leaf digest for `item`."""
        return self.hasher(self.preimage(item))

    def encode_many(self, items: Iterable[CandidateItem]) -> list[bytes]:
        return [self.encode(item) for item in items]


__all__ = [
    "LEAF_DOMAIN_TAG",
    "KIND_BYTES",
    "encode_candidate",
    "LeafEncoder",
]
