"""
Module 07 - Claim Engine

Wires registry, ledger, verifier, encoder and coordinator from a
RuntimeConfig. This is the object the HTTP API and the CLI hold.

Usage:
    engine = ClaimEngine.from_config(RuntimeConfig(), policy=AllowListPolicy({"ops"}))
    cid = engine.create_commitment(root, {"amount": 100}, caller="ops")
    result = engine.submit(cid, CandidateItem.address("0x..."), proof)
    if result.ok:
        pay(result.metadata["amount"])
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from core.claims.commitments import (
    AllowAllPolicy,
    AllowListPolicy,
    CommitmentRegistry,
    ConfigurerPolicy,
)
from core.claims.coordinator import ClaimCoordinator, ClaimEffect, ClaimGuard
from core.claims.encoding import LeafEncoder
from core.claims.ledger import ClaimLedger
from core.claims.store import ClaimStore, InMemoryClaimStore, create_store
from core.config.runtime import RuntimeConfig
from core.crypto.hashing import get_hasher
from core.merkle.verifier import MerkleVerifier
from core.schemas.claims import CandidateItem, ClaimRecord, ClaimResult, Commitment


def policy_from_config(config: RuntimeConfig) -> ConfigurerPolicy:
    """Configurer policy described by the `api` section."""
    if config.api.allow_all_configurers:
        return AllowAllPolicy()
    return AllowListPolicy(config.api.configurers)


class ClaimEngine:
    """Facade over one engine instance and its state."""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        *,
        policy: ConfigurerPolicy | None = None,
        store: ClaimStore | None = None,
        guard: ClaimGuard | None = None,
        effect: ClaimEffect | None = None,
    ) -> None:
        self.config = config or RuntimeConfig()
        hasher = get_hasher(self.config.engine.hash_algorithm)

        self.store = store if store is not None else InMemoryClaimStore()
        self.encoder = LeafEncoder(hasher)
        self.verifier = MerkleVerifier(
            max_depth=self.config.engine.max_proof_depth, hasher=hasher
        )
        self.registry = CommitmentRegistry(
            policy if policy is not None else policy_from_config(self.config),
            store=self.store,
            hasher=hasher,
            id_prefix=self.config.engine.id_prefix,
        )
        self.ledger = ClaimLedger(self.store)
        self.coordinator = ClaimCoordinator(
            self.registry,
            self.ledger,
            self.verifier,
            self.encoder,
            guard=guard,
            effect=effect,
        )

    @classmethod
    def from_config(cls, config: RuntimeConfig, **kwargs: Any) -> "ClaimEngine":
        """Build an engine whose store is chosen by `config.store`."""
        if "store" not in kwargs:
            kwargs["store"] = create_store(config.store.backend, config.store.path)
        return cls(config, **kwargs)

    # Configure
    def create_commitment(
        self,
        root: bytes | str,
        metadata: dict[str, Any] | None = None,
        *,
        caller: Optional[str] = None,
    ) -> str:
        return self.registry.create_commitment(root, metadata, caller=caller)

    def set_active(
        self, commitment_id: str, active: bool, *, caller: Optional[str] = None
    ) -> Commitment:
        return self.registry.set_active(commitment_id, active, caller=caller)

    def replace_commitment(
        self,
        commitment_id: str,
        root: bytes | str,
        metadata: dict[str, Any] | None = None,
        *,
        caller: Optional[str] = None,
    ) -> str:
        return self.registry.replace_commitment(
            commitment_id, root, metadata, caller=caller
        )

    # Claim / fulfill
    def submit(
        self,
        commitment_id: str,
        item: CandidateItem,
        proof: Sequence[bytes],
        effect_context: Optional[dict[str, Any]] = None,
    ) -> ClaimResult:
        return self.coordinator.submit(commitment_id, item, proof, effect_context)

    # Query
    def is_consumed(self, commitment_id: str, identity: str | CandidateItem) -> bool:
        return self.coordinator.is_consumed(commitment_id, identity)

    def get_commitment(self, commitment_id: str) -> Commitment:
        return self.registry.get_commitment(commitment_id)

    def list_commitments(self, active_only: bool = False) -> list[Commitment]:
        return self.registry.list_commitments(active_only)

    def claims_for(self, commitment_id: str) -> list[ClaimRecord]:
        """Claim records of one commitment's epoch."""
        commitment = self.registry.get_commitment(commitment_id)
        return self.ledger.records(commitment.epoch)

    def leaf_for(self, item: CandidateItem) -> bytes:
        return self.encoder.encode(item)
