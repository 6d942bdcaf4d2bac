"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:create_app --factory --reload

    # Or run directly
    python -m api.app
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.deps import build_engine
from api.errors import APIError, api_error_handler, engine_error_handler, generic_error_handler
from api.routes import claims, commitments, health
from core.claims.engine import ClaimEngine
from core.schemas.errors import ClaimGateException


def _resolve_log_level() -> int:
    """Resolve log level from CLAIMGATE_LOG_LEVEL, defaulting to INFO."""
    raw = os.getenv("CLAIMGATE_LOG_LEVEL", "INFO")
    return getattr(logging, raw.upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(engine: ClaimEngine | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine: Engine to serve; built from runtime config when omitted
    """
    app = FastAPI(
        title="Claimgate API",
        description="""
HTTP API for the Merkle membership claim engine.

## Endpoints

- **POST /commitments** - Publish a Merkle root (requires `X-Configurer`)
- **POST /commitments/{id}/active** - Activate / deactivate (requires `X-Configurer`)
- **GET /commitments**, **GET /commitments/{id}** - Read commitments
- **POST /claims** - Claim or fulfill with a candidate item and proof
- **GET /commitments/{id}/claims/{identity}** - Whether an identity has claimed
- **GET /health** - Health check

Each eligible identity can be authorized at most once per commitment.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.engine = engine if engine is not None else build_engine()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(ClaimGateException, engine_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    app.include_router(health.router)
    app.include_router(commitments.router)
    app.include_router(claims.router)

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
