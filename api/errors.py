"""
API Error Handling

Maps engine exceptions and API errors onto the standard ErrorResponse.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import ClaimGateException, ErrorCodes


logger = logging.getLogger(__name__)

# HTTP status for engine exceptions surfaced by configure/query routes
STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.UNKNOWN_COMMITMENT: 404,
    ErrorCodes.UNAUTHORIZED_CONFIGURER: 403,
    ErrorCodes.SCHEMA_VALIDATION_ERROR: 400,
    ErrorCodes.CANONICALIZATION_ERROR: 400,
    ErrorCodes.STORE_ERROR: 503,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class MissingConfigurerError(APIError):
    """Configure route called without an X-Configurer header."""

    def __init__(self):
        super().__init__(
            code="UNAUTHORIZED",
            message="X-Configurer header is required",
            status_code=401,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def engine_error_handler(request: Request, exc: ClaimGateException) -> JSONResponse:
    """Handle exceptions raised by the claim engine."""
    error = exc.to_error_model()
    status_code = STATUS_BY_CODE.get(error.code, 400)
    if status_code >= 500:
        logger.error(f"{error.code} on {request.url.path}: {error.message}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(code=error.code, message=error.message, details=error.details),
        ).model_dump(mode="json"),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
