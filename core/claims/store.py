"""
Module 04 - Engine State Stores

Persisted state of the claim engine is exactly:
- per commitment: root, epoch/id, active flag, metadata
- per (epoch, identity): one consumed record

ClaimStore defines that surface. InMemoryClaimStore keeps it in dicts;
JsonFileStore additionally snapshots it to a canonical JSON file after
every mutation (write to a temp file, then os.replace), so a CLI process
can pick up where the previous one stopped.

Several processes may share one state file (a running `serve` next to CLI
claims). Every JsonFileStore operation holds an exclusive flock on a
sidecar `<file>.lock` and reloads the file if another process replaced it,
so a check-and-insert always runs against the latest state on disk.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import IO, Any, ContextManager, Iterator, Optional

from pydantic import ValidationError

from core.schemas.canonical import dumps_canonical
from core.schemas.claims import ClaimRecord, Commitment
from core.schemas.errors import StoreException
from core.schemas.versioning import STATE_FORMAT_VERSION, is_supported_state_format


logger = logging.getLogger(__name__)

ClaimKey = tuple[int, str]


class ClaimStore(ABC):
    """Storage backend for commitments and claim records."""

    @abstractmethod
    def get_commitment(self, commitment_id: str) -> Optional[Commitment]:
        ...

    @abstractmethod
    def put_commitment(self, commitment: Commitment) -> None:
        """Insert or replace a commitment (replacement only toggles `active`)."""

    @abstractmethod
    def iter_commitments(self) -> Iterator[Commitment]:
        ...

    @abstractmethod
    def get_claim(self, epoch: int, identity: str) -> Optional[ClaimRecord]:
        ...

    @abstractmethod
    def insert_claim_if_absent(self, record: ClaimRecord) -> bool:
        """
        Insert `record` unless its (epoch, identity) slot is taken.

        Returns:
            True if inserted, False if a record already existed
        """

    @abstractmethod
    def delete_claim(self, epoch: int, identity: str) -> None:
        """Drop a record written by a submit transaction that is aborting."""

    @abstractmethod
    def iter_claims(self, epoch: int | None = None) -> Iterator[ClaimRecord]:
        ...

    def locked(self) -> ContextManager[None]:
        """
        Exclusive access to the current state across several calls.

        Callers that read and then write (allocating the next epoch,
        toggling a commitment) hold this so nothing changes in between.
        """
        return nullcontext()

    def last_epoch(self) -> int:
        """Highest epoch used by any stored commitment, 0 if none."""
        return max((c.epoch for c in self.iter_commitments()), default=0)


class InMemoryClaimStore(ClaimStore):
    """Dictionary-backed store; state lives as long as the process."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._commitments: dict[str, Commitment] = {}
        self._claims: dict[ClaimKey, ClaimRecord] = {}

    def locked(self) -> ContextManager[None]:
        return self._guard()

    @contextmanager
    def _guard(self) -> Iterator[None]:
        with self._lock:
            yield

    def get_commitment(self, commitment_id: str) -> Optional[Commitment]:
        with self._guard():
            return self._commitments.get(commitment_id)

    def put_commitment(self, commitment: Commitment) -> None:
        with self._guard():
            previous = self._commitments.get(commitment.commitment_id)
            self._commitments[commitment.commitment_id] = commitment
            try:
                self._persist()
            except StoreException:
                if previous is None:
                    del self._commitments[commitment.commitment_id]
                else:
                    self._commitments[commitment.commitment_id] = previous
                raise

    def iter_commitments(self) -> Iterator[Commitment]:
        with self._guard():
            items = sorted(self._commitments.values(), key=lambda c: c.epoch)
        return iter(items)

    def get_claim(self, epoch: int, identity: str) -> Optional[ClaimRecord]:
        with self._guard():
            return self._claims.get((epoch, identity))

    def insert_claim_if_absent(self, record: ClaimRecord) -> bool:
        key = (record.epoch, record.identity)
        with self._guard():
            if key in self._claims:
                return False
            self._claims[key] = record
            try:
                self._persist()
            except StoreException:
                del self._claims[key]
                raise
            return True

    def delete_claim(self, epoch: int, identity: str) -> None:
        key = (epoch, identity)
        with self._guard():
            record = self._claims.pop(key, None)
            if record is None:
                return
            try:
                self._persist()
            except StoreException:
                self._claims[key] = record
                raise

    def iter_claims(self, epoch: int | None = None) -> Iterator[ClaimRecord]:
        with self._guard():
            records = [
                r for r in self._claims.values()
                if epoch is None or r.epoch == epoch
            ]
        records.sort(key=lambda r: (r.epoch, r.consumed_at, r.identity))
        return iter(records)

    def _persist(self) -> None:
        """Hook for subclasses that write state somewhere durable."""

    def snapshot(self) -> dict[str, Any]:
        """Whole store as a JSON-ready dict."""
        with self._guard():
            return {
                "format_version": STATE_FORMAT_VERSION,
                "commitments": [
                    c.model_dump(mode="json") for c in self.iter_commitments()
                ],
                "claims": [r.model_dump(mode="json") for r in self.iter_claims()],
            }


class JsonFileStore(InMemoryClaimStore):
    """
    In-memory store mirrored to a single JSON state file.

    The in-memory copy is a cache: it is reloaded from disk each time an
    operation takes the file lock, so writes made by other processes are
    never overwritten. Each mutation rewrites the file atomically; a crash
    mid-write leaves the previous snapshot intact.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._depth = 0
        # Initial load; also fails fast on a corrupt or foreign state file
        with self._guard():
            pass

    @contextmanager
    def _guard(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            lock_file = self._acquire_file_lock()
            self._depth = 1
            try:
                self._reload()
                yield
            finally:
                self._depth = 0
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
                lock_file.close()

    def _acquire_file_lock(self) -> IO[str]:
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise StoreException(
                f"Cannot open lock file {self.lock_path}: {e}",
                details={"path": str(self.lock_path)},
            ) from e
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            lock_file.close()
            raise StoreException(
                f"Cannot lock {self.lock_path}: {e}",
                details={"path": str(self.lock_path)},
                retryable=True,
            ) from e
        return lock_file

    def _reload(self) -> None:
        if self.path.exists():
            self._commitments, self._claims = self._load()
        else:
            self._commitments, self._claims = {}, {}

    def _load(self) -> tuple[dict[str, Commitment], dict[ClaimKey, ClaimRecord]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreException(
                f"Cannot read state file {self.path}: {e}",
                details={"path": str(self.path)},
            ) from e

        version = data.get("format_version", "")
        if not is_supported_state_format(version):
            raise StoreException(
                f"Unsupported state format version: {version!r}",
                details={"path": str(self.path)},
            )

        commitments: dict[str, Commitment] = {}
        claims: dict[ClaimKey, ClaimRecord] = {}
        try:
            for raw in data.get("commitments", []):
                c = Commitment.model_validate(raw)
                commitments[c.commitment_id] = c
            for raw in data.get("claims", []):
                r = ClaimRecord.model_validate(raw)
                claims[(r.epoch, r.identity)] = r
        except ValidationError as e:
            raise StoreException(
                f"Corrupt state file {self.path}: {e.error_count()} invalid entries",
                details={"path": str(self.path)},
            ) from e

        logger.debug(
            f"Loaded {len(commitments)} commitments and "
            f"{len(claims)} claims from {self.path}"
        )
        return commitments, claims

    def _persist(self) -> None:
        content = dumps_canonical(self.snapshot())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreException(
                f"Cannot write state file {self.path}: {e}",
                details={"path": str(self.path)},
                retryable=True,
            ) from e
        logger.debug(f"Wrote state snapshot to {self.path}")


def create_store(backend: str = "memory", path: str | Path | None = None) -> ClaimStore:
    """
    Build a store from configuration values.

    Raises:
        StoreException: Unknown backend or file backend without a path
    """
    if backend == "memory":
        return InMemoryClaimStore()
    if backend == "file":
        if path is None:
            raise StoreException("File store requires a path")
        return JsonFileStore(path)
    raise StoreException(f"Unknown store backend: {backend!r}")


__all__ = [
    "ClaimStore",
    "InMemoryClaimStore",
    "JsonFileStore",
    "create_store",
]
