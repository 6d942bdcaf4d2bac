"""
Health Check Route

Liveness probe that also reports which engine configuration is being
served.
"""

from fastapi import APIRouter, Depends

from api.deps import get_engine
from api.models.responses import HealthResponse
from core.claims.engine import ClaimEngine


router = APIRouter(tags=["health"])


def _health(engine: ClaimEngine) -> HealthResponse:
    commitments = engine.list_commitments()
    return HealthResponse(
        hash_algorithm=engine.config.engine.hash_algorithm,
        max_proof_depth=engine.verifier.max_depth,
        commitments=len(commitments),
        active_commitments=sum(1 for c in commitments if c.active),
    )


@router.get("/health", response_model=HealthResponse)
def health_check(engine: ClaimEngine = Depends(get_engine)) -> HealthResponse:
    return _health(engine)


@router.get("/", response_model=HealthResponse)
def root(engine: ClaimEngine = Depends(get_engine)) -> HealthResponse:
    """Same as /health."""
    return _health(engine)
