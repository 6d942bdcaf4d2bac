"""API request/response models."""

from .requests import ClaimRequest, CreateCommitmentRequest, SetActiveRequest
from .responses import (
    ClaimResponse,
    CommitmentListResponse,
    CommitmentResponse,
    ConsumedResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ClaimRequest",
    "CreateCommitmentRequest",
    "SetActiveRequest",
    "ClaimResponse",
    "CommitmentListResponse",
    "CommitmentResponse",
    "ConsumedResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
]
