"""
Runtime Configuration

Central configuration for the claim engine, its state store and the
HTTP/CLI surfaces.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.schemas.errors import ConfigurationException

load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLAIMGATE_"

CONFIG_SEARCH_PATHS = (
    Path("claimgate.json"),
    Path(".claimgate.json"),
    Path.home() / ".config" / "claimgate" / "config.json",
)


@dataclass
class EngineConfig:
    """Verification and commitment settings."""
    max_proof_depth: int = 32
    hash_algorithm: str = "sha256"  # "sha256" or "keccak256"
    id_prefix: str = "cm"

    def __post_init__(self):
        if not 1 <= int(self.max_proof_depth) <= 256:
            raise ConfigurationException(
                f"max_proof_depth must be in 1..256, got {self.max_proof_depth}"
            )
        self.max_proof_depth = int(self.max_proof_depth)
        self.hash_algorithm = self.hash_algorithm.lower()


@dataclass
class StoreConfig:
    """Where engine state lives."""
    backend: str = "memory"  # "memory" or "file"
    path: Optional[str] = None


@dataclass
class ApiConfig:
    """Who may configure commitments through the HTTP API and CLI."""
    configurers: list[str] = field(default_factory=list)
    allow_all_configurers: bool = False


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON or YAML file
    - Programmatic construction
    """
    engine: EngineConfig = field(default_factory=EngineConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - CLAIMGATE_MAX_PROOF_DEPTH: Longest accepted proof
        - CLAIMGATE_HASH_ALGORITHM: sha256 or keccak256
        - CLAIMGATE_STORE_BACKEND: memory or file
        - CLAIMGATE_STORE_PATH: State file for the file backend
        - CLAIMGATE_CONFIGURERS: Comma-separated configurer names
        - CLAIMGATE_ALLOW_ALL_CONFIGURERS: true/false
        - CLAIMGATE_LOG_LEVEL: Logging level
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}MAX_PROOF_DEPTH"):
            try:
                overrides.setdefault("engine", {})["max_proof_depth"] = int(
                    os.getenv(f"{ENV_PREFIX}MAX_PROOF_DEPTH", "")
                )
            except ValueError as e:
                raise ConfigurationException(
                    f"{ENV_PREFIX}MAX_PROOF_DEPTH must be an integer"
                ) from e
        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides.setdefault("engine", {})["hash_algorithm"] = os.getenv(
                f"{ENV_PREFIX}HASH_ALGORITHM"
            )

        if os.getenv(f"{ENV_PREFIX}STORE_BACKEND"):
            overrides.setdefault("store", {})["backend"] = os.getenv(
                f"{ENV_PREFIX}STORE_BACKEND"
            )
        if os.getenv(f"{ENV_PREFIX}STORE_PATH"):
            overrides.setdefault("store", {})["path"] = os.getenv(
                f"{ENV_PREFIX}STORE_PATH"
            )

        if os.getenv(f"{ENV_PREFIX}CONFIGURERS"):
            overrides.setdefault("api", {})["configurers"] = [
                name.strip()
                for name in os.getenv(f"{ENV_PREFIX}CONFIGURERS", "").split(",")
                if name.strip()
            ]
        if os.getenv(f"{ENV_PREFIX}ALLOW_ALL_CONFIGURERS"):
            overrides.setdefault("api", {})["allow_all_configurers"] = (
                os.getenv(f"{ENV_PREFIX}ALLOW_ALL_CONFIGURERS", "false").lower() == "true"
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load from a .json, .yaml or .yml file."""
        path = Path(path)
        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        engine_data = data.get("engine", {})
        store_data = data.get("store", {})
        api_data = data.get("api", {})

        try:
            engine = EngineConfig(**engine_data) if engine_data else EngineConfig()
            store = StoreConfig(**store_data) if store_data else StoreConfig()
            api = ApiConfig(**api_data) if api_data else ApiConfig()
        except TypeError as e:
            raise ConfigurationException(f"Invalid configuration: {e}") from e

        return cls(
            engine=engine,
            store=store,
            api=api,
            log_level=data.get("log_level", "INFO"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        Lets a config file be loaded first and env vars layered on top.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        for section in ("engine", "store", "api"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]

        # Re-run engine validation on the merged values
        new_config.engine = EngineConfig(**vars(new_config.engine))
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "engine": {
                "max_proof_depth": self.engine.max_proof_depth,
                "hash_algorithm": self.engine.hash_algorithm,
                "id_prefix": self.engine.id_prefix,
            },
            "store": {
                "backend": self.store.backend,
                "path": self.store.path,
            },
            "api": {
                "configurers": list(self.api.configurers),
                "allow_all_configurers": self.api.allow_all_configurers,
            },
            "log_level": self.log_level,
            "extra": self.extra,
        }


def load_runtime_config(path: str | Path | None = None) -> RuntimeConfig:
    """
    Load config from `path` or the first file found on the search path,
    then overlay environment variables.

    Search order when no path is given:
      1. ./claimgate.json
      2. ./.claimgate.json
      3. ~/.config/claimgate/config.json
    """
    if path is not None:
        return RuntimeConfig.from_file(path).with_env_overrides()

    for candidate in CONFIG_SEARCH_PATHS:
        if candidate.exists():
            logger.info(f"Loaded config from {candidate}")
            return RuntimeConfig.from_file(candidate).with_env_overrides()

    return RuntimeConfig().with_env_overrides()
