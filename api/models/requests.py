"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from core.schemas.claims import CandidateItem, normalize_digest_hex


class CreateCommitmentRequest(BaseModel):
    """Request body for POST /commitments."""

    root: str = Field(
        ...,
        description="Merkle root as 0x followed by 64 hex characters",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque payload returned to authorized claimers (amount, offer terms)",
    )

    @field_validator("root")
    @classmethod
    def _check_root(cls, v: str) -> str:
        return normalize_digest_hex(v)


class SetActiveRequest(BaseModel):
    """Request body for POST /commitments/{id}/active."""

    active: bool = Field(..., description="New activation state")


class ClaimRequest(BaseModel):
    """Request body for POST /claims."""

    commitment_id: str = Field(..., min_length=1, max_length=128)
    candidate: CandidateItem = Field(
        ...,
        description="Item being claimed, e.g. {'kind': 'address', 'value': '0x...'}",
    )
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling digests, bottom-up, each 0x + 64 hex",
    )

    def proof_bytes(self) -> list[bytes]:
        """
        Decode the proof for the verifier.

        Depth and digest size are left to the verifier so that a bad proof
        is answered as an INVALID_PROOF rejection. Entries that are not hex
        at all decode to b"", which it refuses as a malformed digest.
        """
        return [_decode_proof_element(s) for s in self.proof]


def _decode_proof_element(value: str) -> bytes:
    text = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        return bytes.fromhex(text)
    except ValueError:
        return b""
