"""
Module 01 - Schemas & Canonicalization
File: claims.py

Purpose: Data model of the membership claim engine.

- CandidateItem: an application-level item presented for a claim
  (an address, a token id, or a raw 32-byte identity)
- Commitment: a published Merkle root plus opaque metadata
- ClaimRecord: proof that an identity was consumed in an epoch
- ClaimAuthorized / ClaimRejected: outcome of a submit call
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .canonical import dumps_canonical
from .errors import (
    AlreadyClaimedException,
    ClaimGateException,
    CommitmentInactiveException,
    ErrorCodes,
    MerkleVerificationException,
    PreconditionFailedException,
    UnknownCommitmentException,
)
from .versioning import SCHEMA_VERSION, SUPPORTED_SCHEMA_VERSIONS, UnsupportedSchemaVersionError


_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_DIGEST_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")

UINT256_MAX = 2**256 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_digest_hex(value: Any) -> str:
    """Return a 32-byte digest as lowercase 0x-hex, accepting bytes or hex."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise ValueError(f"digest must be 32 bytes, got {len(value)}")
        return "0x" + bytes(value).hex()
    if isinstance(value, str) and _DIGEST_RE.match(value):
        return value.lower()
    raise ValueError("digest must be 32 bytes or 0x followed by 64 hex characters")


# =============================================================================
# Candidate items
# =============================================================================

class CandidateKind(str, Enum):
    """Kinds of item that can be committed to and claimed."""

    ADDRESS = "address"
    TOKEN_ID = "token_id"
    BYTES32 = "bytes32"


class CandidateItem(BaseModel):
    """
    An item presented for a claim.

    Values are normalised at construction so that every accepted spelling
    of the same item has a single canonical body and identity:

    - address: 0x + 40 hex, lowercased (20-byte body)
    - token_id: integer in [0, 2**256), given as int, decimal or 0x string
      (32-byte big-endian body)
    - bytes32: 32 raw bytes or 0x + 64 hex, lowercased (32-byte body)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: CandidateKind
    value: Union[int, str]

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        kind = CandidateKind(data.get("kind"))
        raw = data.get("value")

        if kind is CandidateKind.ADDRESS:
            if not isinstance(raw, str) or not _ADDRESS_RE.match(raw):
                raise ValueError("address must be 0x followed by 40 hex characters")
            data["value"] = raw.lower()
        elif kind is CandidateKind.TOKEN_ID:
            if isinstance(raw, bool):
                raise ValueError("token_id must be an integer")
            if isinstance(raw, str):
                raw = int(raw, 16) if raw.startswith("0x") else int(raw, 10)
            if not isinstance(raw, int) or not 0 <= raw <= UINT256_MAX:
                raise ValueError("token_id must be an integer in [0, 2**256)")
            data["value"] = raw
        else:
            data["value"] = normalize_digest_hex(raw)

        data["kind"] = kind
        return data

    @classmethod
    def address(cls, value: str) -> "CandidateItem":
        return cls(kind=CandidateKind.ADDRESS, value=value)

    @classmethod
    def token_id(cls, value: int | str) -> "CandidateItem":
        return cls(kind=CandidateKind.TOKEN_ID, value=value)

    @classmethod
    def bytes32(cls, value: bytes | str) -> "CandidateItem":
        return cls(kind=CandidateKind.BYTES32, value=value)

    @classmethod
    def from_identity(cls, text: str) -> "CandidateItem":
        """Parse `kind:value` text, e.g. "address:0xAbC...", into an item."""
        kind, sep, value = text.partition(":")
        if not sep:
            raise ValueError(f"identity must look like kind:value, got {text!r}")
        return cls(kind=kind, value=value)

    def body(self) -> bytes:
        """Fixed-width byte body of the item (20 or 32 bytes)."""
        if self.kind is CandidateKind.TOKEN_ID:
            return int(self.value).to_bytes(32, "big")
        return bytes.fromhex(str(self.value)[2:])

    def identity(self) -> str:
        """
        Stable semantic key under which consumption is tracked.

        Distinct items never share an identity and equal items always do,
        whatever spelling they were constructed from.
        """
        return f"{self.kind.value}:{self.value}"


# =============================================================================
# Commitments and claim records
# =============================================================================

class Commitment(BaseModel):
    """
    A published Merkle root defining one set of eligible items.

    Immutable: toggling `active` stores a new instance with every other
    field unchanged.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    commitment_id: str = Field(..., min_length=1)
    root: str = Field(..., description="Merkle root as 0x-hex")
    epoch: int = Field(..., ge=1, description="Scope of this commitment's claim history")
    active: bool = True
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque application payload returned on authorization",
    )
    metadata_hash: str | None = Field(default=None)
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("schema_version")
    @classmethod
    def _check_schema_version(cls, v: str) -> str:
        if v not in SUPPORTED_SCHEMA_VERSIONS:
            raise UnsupportedSchemaVersionError(v)
        return v

    @field_validator("root", mode="before")
    @classmethod
    def _check_root(cls, v: Any) -> str:
        return normalize_digest_hex(v)

    @field_validator("metadata")
    @classmethod
    def _check_metadata(cls, v: dict[str, Any]) -> dict[str, Any]:
        # Raises CanonicalizationException for values with no stable form
        dumps_canonical(v)
        return v

    @property
    def root_bytes(self) -> bytes:
        return bytes.fromhex(self.root[2:])


class ClaimRecord(BaseModel):
    """A consumed (epoch, identity) slot. Kept for good once its submit completes."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    epoch: int = Field(..., ge=1)
    identity: str = Field(..., min_length=1)
    commitment_id: str | None = None
    consumed_at: datetime = Field(default_factory=_utcnow)


# =============================================================================
# Submit outcomes
# =============================================================================

class RejectionReason(str, Enum):
    """Why a submit call was rejected."""

    UNKNOWN_COMMITMENT = ErrorCodes.UNKNOWN_COMMITMENT
    COMMITMENT_INACTIVE = ErrorCodes.COMMITMENT_INACTIVE
    INVALID_PROOF = ErrorCodes.INVALID_PROOF
    PRECONDITION_FAILED = ErrorCodes.PRECONDITION_FAILED
    ALREADY_CLAIMED = ErrorCodes.ALREADY_CLAIMED


class ClaimAuthorized(BaseModel):
    """The claim was consumed; the caller may now perform the effect."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["authorized"] = "authorized"
    commitment_id: str
    epoch: int
    identity: str
    leaf: str = Field(..., description="Leaf digest as 0x-hex")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True


class ClaimRejected(BaseModel):
    """The claim was refused before any state change."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["rejected"] = "rejected"
    reason: RejectionReason
    message: str
    commitment_id: str
    identity: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    def to_exception(self) -> ClaimGateException:
        """Raise-able form for callers that prefer exceptions."""
        reason = self.reason
        if reason is RejectionReason.UNKNOWN_COMMITMENT:
            return UnknownCommitmentException(self.commitment_id)
        if reason is RejectionReason.COMMITMENT_INACTIVE:
            return CommitmentInactiveException(self.commitment_id)
        if reason is RejectionReason.INVALID_PROOF:
            return MerkleVerificationException(
                self.message,
                reason=self.details.get("proof_failure"),
                details=dict(self.details),
            )
        if reason is RejectionReason.PRECONDITION_FAILED:
            return PreconditionFailedException(self.message, details=dict(self.details))
        return AlreadyClaimedException(self.details.get("epoch", 0), self.identity or "")


ClaimResult = Annotated[
    Union[ClaimAuthorized, ClaimRejected],
    Field(discriminator="status"),
]
