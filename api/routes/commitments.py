"""
Commitment Routes

Publish, read and (de)activate commitments. Write routes require an
X-Configurer header; whether that caller may act is decided by the
engine's configurer policy.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_engine, require_configurer
from api.models.requests import CreateCommitmentRequest, SetActiveRequest
from api.models.responses import (
    CommitmentListResponse,
    CommitmentResponse,
    ConsumedResponse,
)
from core.claims.engine import ClaimEngine


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commitments", tags=["commitments"])


@router.post("", response_model=CommitmentResponse, status_code=201)
def create_commitment(
    body: CreateCommitmentRequest,
    caller: str = Depends(require_configurer),
    engine: ClaimEngine = Depends(get_engine),
) -> CommitmentResponse:
    """Publish a new Merkle root under a fresh epoch."""
    commitment_id = engine.create_commitment(body.root, body.metadata, caller=caller)
    return CommitmentResponse(commitment=engine.get_commitment(commitment_id))


@router.get("", response_model=CommitmentListResponse)
def list_commitments(
    active_only: bool = False,
    engine: ClaimEngine = Depends(get_engine),
) -> CommitmentListResponse:
    return CommitmentListResponse(commitments=engine.list_commitments(active_only))


@router.get("/{commitment_id}", response_model=CommitmentResponse)
def get_commitment(
    commitment_id: str,
    engine: ClaimEngine = Depends(get_engine),
) -> CommitmentResponse:
    return CommitmentResponse(commitment=engine.get_commitment(commitment_id))


@router.post("/{commitment_id}/active", response_model=CommitmentResponse)
def set_active(
    commitment_id: str,
    body: SetActiveRequest,
    caller: str = Depends(require_configurer),
    engine: ClaimEngine = Depends(get_engine),
) -> CommitmentResponse:
    """Activate or deactivate a commitment. Idempotent."""
    return CommitmentResponse(
        commitment=engine.set_active(commitment_id, body.active, caller=caller)
    )


@router.get("/{commitment_id}/claims/{identity}", response_model=ConsumedResponse)
def is_consumed(
    commitment_id: str,
    identity: str,
    engine: ClaimEngine = Depends(get_engine),
) -> ConsumedResponse:
    """Whether `identity` (e.g. address:0x...) has claimed under this commitment."""
    return ConsumedResponse(
        commitment_id=commitment_id,
        identity=identity,
        consumed=engine.is_consumed(commitment_id, identity),
    )
