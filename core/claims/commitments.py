"""
Module 05 - Commitments

Configuration side of the engine:
- EpochSequence: an explicitly owned, monotonically increasing id source
- ConfigurerPolicy: injected "may this caller configure commitments" check
- CommitmentRegistry: create / activate / deactivate / replace / read

A commitment's root and epoch are fixed at creation. The only mutation is
the `active` flag. Commitments are retained after deactivation so their
claim history stays queryable.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from core.claims.store import ClaimStore, InMemoryClaimStore
from core.crypto.hashing import Hasher, hash_canonical, sha256, to_hex
from core.schemas.claims import Commitment, normalize_digest_hex
from core.schemas.errors import (
    SchemaValidationException,
    UnauthorizedConfigurerException,
    UnknownCommitmentException,
)


logger = logging.getLogger(__name__)


class EpochSequence:
    """
    Thread-safe counter handing out commitment epochs.

    Each engine owns its own sequence; there is no module-level counter.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError(f"Epoch sequence must start at 1 or above, got {start}")
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def peek(self) -> int:
        """The epoch the next call to next() will return."""
        return self._next

    def advance_past(self, epoch: int) -> None:
        """Make sure the next epoch handed out is above `epoch`."""
        with self._lock:
            self._next = max(self._next, epoch + 1)


@runtime_checkable
class ConfigurerPolicy(Protocol):
    """Decides whether a caller may create or toggle commitments."""

    def is_authorized(self, caller: Optional[str]) -> bool:
        ...


class AllowListPolicy:
    """Authorizes a fixed set of caller names."""

    def __init__(self, callers: Iterable[str]) -> None:
        self.callers = frozenset(callers)

    def is_authorized(self, caller: Optional[str]) -> bool:
        return caller is not None and caller in self.callers


class AllowAllPolicy:
    """Authorizes every caller. Intended for tests and local tooling."""

    def is_authorized(self, caller: Optional[str]) -> bool:
        return True


class CommitmentRegistry:
    """
    Owns the set of commitments known to one engine.

    Usage:
        registry = CommitmentRegistry(policy=AllowListPolicy({"ops"}))
        cid = registry.create_commitment(root, {"amount": 100}, caller="ops")
        registry.set_active(cid, False, caller="ops")
    """

    def __init__(
        self,
        policy: ConfigurerPolicy,
        *,
        store: ClaimStore | None = None,
        sequence: EpochSequence | None = None,
        hasher: Hasher = sha256,
        id_prefix: str = "cm",
    ) -> None:
        self._policy = policy
        self._store = store if store is not None else InMemoryClaimStore()
        self._sequence = (
            sequence if sequence is not None
            else EpochSequence(start=self._store.last_epoch() + 1)
        )
        self._hasher = hasher
        self._id_prefix = id_prefix
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuration (configurer only)
    # ------------------------------------------------------------------

    def create_commitment(
        self,
        root: bytes | str,
        metadata: dict[str, Any] | None = None,
        *,
        caller: Optional[str] = None,
    ) -> str:
        """
        Publish a new root under a fresh epoch.

        Returns:
            The new commitment_id

        Raises:
            UnauthorizedConfigurerException: Caller rejected by the policy
            SchemaValidationException: Root is not a 32-byte digest
            CanonicalizationException: Metadata has no canonical JSON form
        """
        self._authorize(caller, "create commitments")
        try:
            root_hex = normalize_digest_hex(root)
        except ValueError as e:
            raise SchemaValidationException(str(e), field_path="root") from e
        metadata = copy.deepcopy(dict(metadata or {}))
        metadata_hash = to_hex(hash_canonical(metadata, self._hasher))

        with self._lock, self._store.locked():
            # Another engine sharing the store may have used epochs since ours was seeded
            self._sequence.advance_past(self._store.last_epoch())
            epoch = self._sequence.next()
            commitment = Commitment(
                commitment_id=f"{self._id_prefix}_{epoch}",
                root=root_hex,
                epoch=epoch,
                active=True,
                metadata=metadata,
                metadata_hash=metadata_hash,
                created_by=caller,
            )
            self._store.put_commitment(commitment)

        logger.info(
            f"Created commitment {commitment.commitment_id} "
            f"(epoch={epoch}, root={root_hex[:18]}...)"
        )
        return commitment.commitment_id

    def set_active(
        self,
        commitment_id: str,
        active: bool,
        *,
        caller: Optional[str] = None,
    ) -> Commitment:
        """
        Activate or deactivate a commitment. Idempotent.

        Raises:
            UnauthorizedConfigurerException: Caller rejected by the policy
            UnknownCommitmentException: No such commitment
        """
        self._authorize(caller, "change commitment activation")
        with self._lock, self._store.locked():
            current = self._require(commitment_id)
            if current.active == active:
                return current.model_copy(deep=True)
            updated = current.model_copy(update={"active": active})
            self._store.put_commitment(updated)

        logger.info(
            f"Commitment {commitment_id} {'activated' if active else 'deactivated'} by {caller}"
        )
        return updated.model_copy(deep=True)

    def replace_commitment(
        self,
        commitment_id: str,
        root: bytes | str,
        metadata: dict[str, Any] | None = None,
        *,
        caller: Optional[str] = None,
    ) -> str:
        """
        Retire a commitment and publish its successor.

        The successor gets a new epoch, so identities claimed under the old
        root may claim again under the new one.

        Returns:
            The successor's commitment_id
        """
        self._authorize(caller, "replace commitments")
        self.get_commitment(commitment_id)
        new_id = self.create_commitment(root, metadata, caller=caller)
        self.set_active(commitment_id, False, caller=caller)
        logger.info(f"Commitment {commitment_id} replaced by {new_id}")
        return new_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    # Reads hand out deep copies: a caller editing returned metadata must
    # not change what later authorizations carry.

    def find(self, commitment_id: str) -> Optional[Commitment]:
        commitment = self._store.get_commitment(commitment_id)
        return None if commitment is None else commitment.model_copy(deep=True)

    def get_commitment(self, commitment_id: str) -> Commitment:
        """
        Raises:
            UnknownCommitmentException: No such commitment
        """
        return self._require(commitment_id).model_copy(deep=True)

    def list_commitments(self, active_only: bool = False) -> list[Commitment]:
        return [
            c.model_copy(deep=True) for c in self._store.iter_commitments()
            if c.active or not active_only
        ]

    @property
    def next_epoch(self) -> int:
        return self._sequence.peek()

    def _require(self, commitment_id: str) -> Commitment:
        commitment = self._store.get_commitment(commitment_id)
        if commitment is None:
            raise UnknownCommitmentException(commitment_id)
        return commitment

    def _authorize(self, caller: Optional[str], action: str) -> None:
        if not self._policy.is_authorized(caller):
            logger.warning(f"Rejected configurer {caller!r}: may not {action}")
            raise UnauthorizedConfigurerException(caller, action)


__all__ = [
    "EpochSequence",
    "ConfigurerPolicy",
    "AllowListPolicy",
    "AllowAllPolicy",
    "CommitmentRegistry",
]
