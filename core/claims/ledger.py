"""
Module 04 - Claim Ledger

Records, per commitment epoch, which candidate identities have been consumed.

Keys are (epoch, identity) where identity is the semantic identity of the
claimed item (CandidateItem.identity()). Proof bytes and bare leaf digests
are never used as keys: several distinct proofs can authenticate the same
leaf, and a leaf digest alone would not scope claims to an epoch.

try_consume is a single test-and-set under one lock. Concurrent or repeated
calls for the same key see exactly one CONSUMED; every other call sees
ALREADY_CONSUMED and changes nothing.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Optional

from core.claims.store import ClaimStore, InMemoryClaimStore
from core.schemas.claims import ClaimRecord


logger = logging.getLogger(__name__)


class ConsumeOutcome(str, Enum):
    CONSUMED = "consumed"
    ALREADY_CONSUMED = "already_consumed"


class ClaimLedger:
    """
    Single-use consumption ledger.

    Usage:
        ledger = ClaimLedger()
        ledger.try_consume(1, "address:0xabc...")   # CONSUMED
        ledger.try_consume(1, "address:0xabc...")   # ALREADY_CONSUMED
        ledger.query(1, "address:0xabc...")         # True
        ledger.query(2, "address:0xabc...")         # False, other epoch
    """

    def __init__(self, store: ClaimStore | None = None) -> None:
        self._store = store if store is not None else InMemoryClaimStore()
        self._lock = threading.Lock()

    @property
    def store(self) -> ClaimStore:
        return self._store

    def try_consume(
        self,
        epoch: int,
        identity: str,
        *,
        commitment_id: str | None = None,
    ) -> ConsumeOutcome:
        """Atomically mark (epoch, identity) consumed if it is not already."""
        record = ClaimRecord(epoch=epoch, identity=identity, commitment_id=commitment_id)
        with self._lock:
            inserted = self._store.insert_claim_if_absent(record)
        if not inserted:
            return ConsumeOutcome.ALREADY_CONSUMED
        logger.debug(f"Consumed {identity} in epoch {epoch}")
        return ConsumeOutcome.CONSUMED

    def release(self, epoch: int, identity: str) -> None:
        """
        Undo a consumption made earlier in the same, now aborting, submit.

        Only the coordinator calls this, while still holding its submit lock,
        when the downstream effect failed. A claim whose submit completed is
        never released.
        """
        with self._lock:
            self._store.delete_claim(epoch, identity)
        logger.warning(f"Released {identity} in epoch {epoch} after aborted submit")

    def query(self, epoch: int, identity: str) -> bool:
        return self._store.get_claim(epoch, identity) is not None

    def get_record(self, epoch: int, identity: str) -> Optional[ClaimRecord]:
        return self._store.get_claim(epoch, identity)

    def records(self, epoch: int | None = None) -> list[ClaimRecord]:
        """All records, optionally restricted to one epoch (audit view)."""
        return list(self._store.iter_claims(epoch))

    def count(self, epoch: int) -> int:
        return sum(1 for _ in self._store.iter_claims(epoch))


__all__ = ["ConsumeOutcome", "ClaimLedger"]
