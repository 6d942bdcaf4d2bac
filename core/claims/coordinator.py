"""
Module 06 - Claim Coordinator

Runs one claim/fulfill request end to end:

    1. look up the commitment        -> UNKNOWN_COMMITMENT / COMMITMENT_INACTIVE
    2. leaf = LeafEncoder.encode(item)
    3. verify proof against the root -> INVALID_PROOF
    4. optional ClaimGuard check     -> PRECONDITION_FAILED
    5. ledger test-and-set           -> ALREADY_CLAIMED
    6. optional ClaimEffect
    7. ClaimAuthorized(metadata)

Nothing is written before step 5 succeeds, and the effect only runs after
the identity is consumed. A submit re-entered from inside an effect
therefore finds its identity taken. If the effect raises, the consumption
is released before the exception propagates, so a submit either completes
fully or leaves no trace.

The guard sits between verification and consumption: a marketplace
ownership or approval check that fails must not burn the claim slot.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

from core.claims.commitments import CommitmentRegistry
from core.claims.encoding import LeafEncoder
from core.claims.ledger import ClaimLedger, ConsumeOutcome
from core.crypto.hashing import to_hex
from core.merkle.verifier import MerkleVerifier
from core.schemas.claims import (
    CandidateItem,
    ClaimAuthorized,
    ClaimRejected,
    ClaimResult,
    Commitment,
    RejectionReason,
)
from core.schemas.errors import (
    MerkleVerificationException,
    PreconditionFailedException,
    SchemaValidationException,
    StoreException,
)


logger = logging.getLogger(__name__)


@runtime_checkable
class ClaimGuard(Protocol):
    """
    External precondition checked after proof verification and before
    consumption (e.g. the presenter owns and has approved the token).

    Raise PreconditionFailedException to refuse.
    """

    def check(
        self,
        commitment: Commitment,
        item: CandidateItem,
        context: Optional[dict[str, Any]],
    ) -> None:
        ...


@runtime_checkable
class ClaimEffect(Protocol):
    """The value transfer or fulfillment performed for an authorized claim."""

    def apply(self, authorized: ClaimAuthorized, context: Optional[dict[str, Any]]) -> None:
        ...


class ClaimCoordinator:
    """
    Orchestrates encoder, verifier and ledger for single submit calls.

    Every submit runs under one re-entrant lock, so submits are serialized
    and an effect that calls back into submit sees the state it left.
    """

    def __init__(
        self,
        registry: CommitmentRegistry,
        ledger: ClaimLedger,
        verifier: MerkleVerifier,
        encoder: LeafEncoder,
        *,
        guard: ClaimGuard | None = None,
        effect: ClaimEffect | None = None,
        identity_of: Callable[[CandidateItem], str] = CandidateItem.identity,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.verifier = verifier
        self.encoder = encoder
        self.guard = guard
        self.effect = effect
        self._identity_of = identity_of
        self._lock = threading.RLock()

    def submit(
        self,
        commitment_id: str,
        item: CandidateItem,
        proof: Sequence[bytes],
        effect_context: Optional[dict[str, Any]] = None,
    ) -> ClaimResult:
        """
        Try to claim `item` against commitment `commitment_id`.

        Returns:
            ClaimAuthorized carrying the commitment metadata, or
            ClaimRejected with the reason. Rejections never change state.
        """
        with self._lock:
            return self._submit(commitment_id, item, list(proof), effect_context)

    def _submit(
        self,
        commitment_id: str,
        item: CandidateItem,
        proof: list[bytes],
        effect_context: Optional[dict[str, Any]],
    ) -> ClaimResult:
        commitment = self.registry.find(commitment_id)
        if commitment is None:
            return self._reject(
                RejectionReason.UNKNOWN_COMMITMENT,
                f"Unknown commitment: {commitment_id}",
                commitment_id,
            )
        if not commitment.active:
            return self._reject(
                RejectionReason.COMMITMENT_INACTIVE,
                f"Commitment is inactive: {commitment_id}",
                commitment_id,
            )

        leaf = self.encoder.encode(item)
        try:
            self.verifier.check(leaf, proof, commitment.root_bytes)
        except MerkleVerificationException as e:
            return self._reject(
                RejectionReason.INVALID_PROOF,
                e.message,
                commitment_id,
                details={"proof_failure": e.reason, "depth": len(proof)},
            )

        identity = self._identity_of(item)

        if self.guard is not None:
            try:
                self.guard.check(commitment, item, effect_context)
            except PreconditionFailedException as e:
                return self._reject(
                    RejectionReason.PRECONDITION_FAILED,
                    e.message,
                    commitment_id,
                    identity=identity,
                    details=e.details,
                )

        outcome = self.ledger.try_consume(
            commitment.epoch, identity, commitment_id=commitment_id
        )
        if outcome is ConsumeOutcome.ALREADY_CONSUMED:
            return self._reject(
                RejectionReason.ALREADY_CLAIMED,
                f"{identity} already claimed in epoch {commitment.epoch}",
                commitment_id,
                identity=identity,
                details={"epoch": commitment.epoch},
            )

        authorized = ClaimAuthorized(
            commitment_id=commitment_id,
            epoch=commitment.epoch,
            identity=identity,
            leaf=to_hex(leaf),
            metadata=commitment.metadata,
        )

        if self.effect is not None:
            try:
                self.effect.apply(authorized, effect_context)
            except Exception:
                logger.exception(f"Effect failed for {identity} on {commitment_id}")
                try:
                    self.ledger.release(commitment.epoch, identity)
                except StoreException:
                    # The slot stays consumed; the effect's error is the one raised
                    logger.exception(f"Could not release {identity} on {commitment_id}")
                raise

        logger.info(f"Authorized {identity} on {commitment_id} (epoch={commitment.epoch})")
        return authorized

    def is_consumed(self, commitment_id: str, identity: str | CandidateItem) -> bool:
        """
        Whether an item has claimed under `commitment_id`.

        `identity` is a CandidateItem or its `kind:value` text in any
        accepted spelling (checksummed address, hex token id, ...).

        Raises:
            UnknownCommitmentException: No such commitment
            SchemaValidationException: `identity` does not name a valid item
        """
        commitment = self.registry.get_commitment(commitment_id)
        if not isinstance(identity, CandidateItem):
            try:
                identity = CandidateItem.from_identity(identity)
            except ValueError as e:
                raise SchemaValidationException(str(e), field_path="identity") from e
        return self.ledger.query(commitment.epoch, self._identity_of(identity))

    def get_commitment(self, commitment_id: str) -> Commitment:
        return self.registry.get_commitment(commitment_id)

    def _reject(
        self,
        reason: RejectionReason,
        message: str,
        commitment_id: str,
        *,
        identity: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> ClaimRejected:
        logger.info(f"Rejected claim on {commitment_id}: {reason.value} ({message})")
        return ClaimRejected(
            reason=reason,
            message=message,
            commitment_id=commitment_id,
            identity=identity,
            details=details or {},
        )


__all__ = [
    "ClaimGuard",
    "ClaimEffect",
    "ClaimCoordinator",
]
