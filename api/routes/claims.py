"""
Claim Route

Submit a candidate item and proof against a commitment.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_engine
from api.models.requests import ClaimRequest
from api.models.responses import ClaimResponse
from core.claims.engine import ClaimEngine
from core.schemas.claims import ClaimAuthorized


logger = logging.getLogger(__name__)

router = APIRouter(tags=["claims"])


@router.post("/claims", response_model=ClaimResponse)
def submit_claim(
    body: ClaimRequest,
    engine: ClaimEngine = Depends(get_engine),
) -> ClaimResponse:
    """
    Claim or fulfill against a commitment.

    Always answers 200; `ok` tells whether the claim was authorized and
    `reason` carries the rejection code otherwise (UNKNOWN_COMMITMENT,
    COMMITMENT_INACTIVE, INVALID_PROOF, PRECONDITION_FAILED, ALREADY_CLAIMED).
    """
    result = engine.submit(body.commitment_id, body.candidate, body.proof_bytes())

    if isinstance(result, ClaimAuthorized):
        return ClaimResponse(
            ok=True,
            status=result.status,
            commitment_id=result.commitment_id,
            identity=result.identity,
            epoch=result.epoch,
            leaf=result.leaf,
            metadata=result.metadata,
        )

    return ClaimResponse(
        ok=False,
        status=result.status,
        commitment_id=result.commitment_id,
        identity=result.identity,
        reason=result.reason.value,
        message=result.message,
        details=result.details,
    )
