"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

from .versioning import (
    SCHEMA_VERSION,
    STATE_FORMAT_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    SUPPORTED_STATE_FORMAT_VERSIONS,
    UnsupportedSchemaVersionError,
    is_supported_state_format,
)

from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    loads_canonical,
)

from .errors import (
    AlreadyClaimedException,
    CanonicalizationException,
    ClaimGateError,
    ClaimGateException,
    CommitmentInactiveException,
    ConfigurationException,
    ErrorCodes,
    MerkleVerificationException,
    PreconditionFailedException,
    SchemaValidationException,
    StoreException,
    UnauthorizedConfigurerException,
    UnknownCommitmentException,
)

from .claims import (
    CandidateItem,
    CandidateKind,
    ClaimAuthorized,
    ClaimRecord,
    ClaimRejected,
    ClaimResult,
    Commitment,
    RejectionReason,
    normalize_digest_hex,
)

__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "STATE_FORMAT_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SUPPORTED_STATE_FORMAT_VERSIONS",
    "UnsupportedSchemaVersionError",
    "is_supported_state_format",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "loads_canonical",
    # Errors
    "AlreadyClaimedException",
    "CanonicalizationException",
    "ClaimGateError",
    "ClaimGateException",
    "CommitmentInactiveException",
    "ConfigurationException",
    "ErrorCodes",
    "MerkleVerificationException",
    "PreconditionFailedException",
    "SchemaValidationException",
    "StoreException",
    "UnauthorizedConfigurerException",
    "UnknownCommitmentException",
    # Claims
    "CandidateItem",
    "CandidateKind",
    "ClaimAuthorized",
    "ClaimRecord",
    "ClaimRejected",
    "ClaimResult",
    "Commitment",
    "RejectionReason",
    "normalize_digest_hex",
]
