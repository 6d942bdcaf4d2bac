"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.schemas.claims import Commitment


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "claimgate-api"
    version: str = "v1"
    hash_algorithm: str
    max_proof_depth: int
    commitments: int = Field(0, description="Commitments known to the engine")
    active_commitments: int = 0


class CommitmentResponse(BaseModel):
    """A single commitment."""

    ok: bool = True
    commitment: Commitment


class CommitmentListResponse(BaseModel):
    """Response for GET /commitments."""

    ok: bool = True
    commitments: list[Commitment] = Field(default_factory=list)


class ClaimResponse(BaseModel):
    """Response for POST /claims. Rejections are reported with ok=false."""

    ok: bool = Field(..., description="Whether the claim was authorized")
    status: str = Field(..., description="'authorized' or 'rejected'")
    commitment_id: str
    identity: str | None = None
    epoch: int | None = None
    leaf: str | None = None
    reason: str | None = Field(default=None, description="Rejection reason code")
    message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Rejection details, e.g. proof_failure for INVALID_PROOF",
    )


class ConsumedResponse(BaseModel):
    """Response for GET /commitments/{id}/claims/{identity}."""

    ok: bool = True
    commitment_id: str
    identity: str
    consumed: bool


class ErrorDetail(BaseModel):
    """Error details."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail
