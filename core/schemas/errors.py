"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the claim engine.
Error codes are shared by two forms: ClaimGateError (data, for the API and
CLI output) and ClaimGateException subclasses (raised by configuration and
read paths). Claim submission reports its rejections as values instead.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Schema & Validation Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Commitment Errors
    UNKNOWN_COMMITMENT = "UNKNOWN_COMMITMENT"
    COMMITMENT_INACTIVE = "COMMITMENT_INACTIVE"
    UNAUTHORIZED_CONFIGURER = "UNAUTHORIZED_CONFIGURER"

    # Merkle & Claim Errors
    INVALID_PROOF = "INVALID_PROOF"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"

    # Persistence Errors
    STORE_ERROR = "STORE_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class ClaimGateError(BaseModel):
    """
    An engine error as data: what the HTTP layer serializes and what a
    caller can inspect without catching anything.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    code: str = Field(..., description="One of ErrorCodes", examples=[ErrorCodes.INVALID_PROOF])
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = Field(default=False, description="Same call may succeed later")

    def to_exception(self) -> "ClaimGateException":
        return ClaimGateException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ClaimGateException(Exception):
    """Root of the claim engine's exception hierarchy."""

    def __init__(
        self,
        message: str,
        code: str = "CLAIMGATE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> ClaimGateError:
        return ClaimGateError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(ClaimGateException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class SchemaValidationException(ClaimGateException):
    """Exception raised when input data fails validation."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.SCHEMA_VALIDATION_ERROR,
            details=full_details,
        )


class ConfigurationException(ClaimGateException):
    """Exception raised for unusable configuration values."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=details,
        )


class UnknownCommitmentException(ClaimGateException):
    """Exception raised when a commitment id does not exist."""

    def __init__(self, commitment_id: str) -> None:
        super().__init__(
            message=f"Unknown commitment: {commitment_id}",
            code=ErrorCodes.UNKNOWN_COMMITMENT,
            details={"commitment_id": commitment_id},
        )
        self.commitment_id = commitment_id


class CommitmentInactiveException(ClaimGateException):
    """Exception raised when a deactivated commitment is used."""

    def __init__(self, commitment_id: str) -> None:
        super().__init__(
            message=f"Commitment is inactive: {commitment_id}",
            code=ErrorCodes.COMMITMENT_INACTIVE,
            details={"commitment_id": commitment_id},
        )
        self.commitment_id = commitment_id


class UnauthorizedConfigurerException(ClaimGateException):
    """Exception raised when a caller may not configure commitments."""

    def __init__(self, caller: str | None, action: str) -> None:
        super().__init__(
            message=f"Caller {caller!r} is not authorized to {action}",
            code=ErrorCodes.UNAUTHORIZED_CONFIGURER,
            details={"caller": caller, "action": action},
        )
        self.caller = caller


class MerkleVerificationException(ClaimGateException):
    """Exception raised when Merkle proof verification fails."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if reason:
            full_details["reason"] = reason
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_PROOF,
            details=full_details,
        )
        self.reason = reason


class PreconditionFailedException(ClaimGateException):
    """Exception raised by a claim guard that refuses a verified claim."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PRECONDITION_FAILED,
            details=details,
        )


class AlreadyClaimedException(ClaimGateException):
    """Exception raised when an identity was already consumed in an epoch."""

    def __init__(self, epoch: int, identity: str) -> None:
        super().__init__(
            message=f"{identity} already claimed in epoch {epoch}",
            code=ErrorCodes.ALREADY_CLAIMED,
            details={"epoch": epoch, "identity": identity},
        )


class StoreException(ClaimGateException):
    """Exception raised when engine state cannot be read or written."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.STORE_ERROR,
            details=details,
            retryable=retryable,
        )
