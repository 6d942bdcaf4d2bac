"""
Membership claim engine.

Merkle-commitment membership checks plus an at-most-once claim ledger,
for airdrop-style claims and allow-listed order fulfillment.
"""

from .commitments import (
    AllowAllPolicy,
    AllowListPolicy,
    CommitmentRegistry,
    ConfigurerPolicy,
    EpochSequence,
)
from core.schemas.claims import ClaimResult

from .coordinator import ClaimCoordinator, ClaimEffect, ClaimGuard
from .encoding import KIND_BYTES, LEAF_DOMAIN_TAG, LeafEncoder, encode_candidate
from .engine import ClaimEngine, policy_from_config
from .ledger import ClaimLedger, ConsumeOutcome
from .store import ClaimStore, InMemoryClaimStore, JsonFileStore, create_store

__all__ = [
    "AllowAllPolicy",
    "AllowListPolicy",
    "CommitmentRegistry",
    "ConfigurerPolicy",
    "EpochSequence",
    "ClaimCoordinator",
    "ClaimEffect",
    "ClaimGuard",
    "ClaimResult",
    "KIND_BYTES",
    "LEAF_DOMAIN_TAG",
    "LeafEncoder",
    "encode_candidate",
    "ClaimEngine",
    "policy_from_config",
    "ClaimLedger",
    "ConsumeOutcome",
    "ClaimStore",
    "InMemoryClaimStore",
    "JsonFileStore",
    "create_store",
]
