"""
Runtime Configuration Module

Provides configuration loading for the claim engine.
"""

from .runtime import (
    ApiConfig,
    EngineConfig,
    RuntimeConfig,
    StoreConfig,
    load_runtime_config,
)

__all__ = [
    "ApiConfig",
    "EngineConfig",
    "RuntimeConfig",
    "StoreConfig",
    "load_runtime_config",
]
