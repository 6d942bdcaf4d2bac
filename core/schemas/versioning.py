"""
Module 01 - Schemas & Canonicalization
File: versioning.py

Purpose: Centralize schema and persisted-state version constants.
No imports from other schema files to avoid circular dependencies.
"""

# Current schema version - stamped on every persisted model
SCHEMA_VERSION: str = "v1"

# Version of the JSON state file written by the file store
STATE_FORMAT_VERSION: str = "1.0"


SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"v1"})
SUPPORTED_STATE_FORMAT_VERSIONS: frozenset[str] = frozenset({"1.0"})


class UnsupportedSchemaVersionError(ValueError):
    """Raised when an unsupported schema version is encountered."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_SCHEMA_VERSIONS
        super().__init__(
            f"Unsupported schema version: '{version}'. "
            f"Supported versions: {sorted(self.supported)}"
        )


def is_supported_state_format(version: str) -> bool:
    """Check whether a state file version can be loaded."""
    return version in SUPPORTED_STATE_FORMAT_VERSIONS
