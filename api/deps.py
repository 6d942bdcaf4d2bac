"""
API Dependencies

Dependency injection for the API: the engine instance owned by the app
and the configurer identity of the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, Request

from api.errors import MissingConfigurerError
from core.claims.engine import ClaimEngine
from core.config.runtime import RuntimeConfig, load_runtime_config

logger = logging.getLogger(__name__)


def build_engine(config: RuntimeConfig | None = None) -> ClaimEngine:
    """
    Build the engine an app serves.

    Config file is found via load_runtime_config; environment variables
    always override file values.
    """
    config = config or load_runtime_config()
    engine = ClaimEngine.from_config(config)
    logger.info(
        f"Engine ready: hash={config.engine.hash_algorithm}, "
        f"max_depth={config.engine.max_proof_depth}, store={config.store.backend}"
    )
    return engine


def get_engine(request: Request) -> ClaimEngine:
    """The engine stored on app.state by create_app."""
    return request.app.state.engine


def require_configurer(
    x_configurer: Optional[str] = Header(default=None),
) -> str:
    """Caller name for configure routes; the engine's policy decides if it may act."""
    if not x_configurer:
        raise MissingConfigurerError()
    return x_configurer
