"""Maps domain and adapter errors onto HTTP responses."""

import logfire
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from murmur.adapter.error import ProviderError
from murmur.domain.error import (
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
    PolicyRejectionError,
    RateLimitExceededError,
    ValidationError,
)
from murmur.util.error import InvalidPublicIdError

# Lookup follows the exception's MRO, so subclasses may override their base
ERROR_STATUS: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidPublicIdError: status.HTTP_400_BAD_REQUEST,
    NotAuthenticatedError: status.HTTP_401_UNAUTHORIZED,
    NotAuthorizedError: status.HTTP_403_FORBIDDEN,
    PolicyRejectionError: status.HTTP_403_FORBIDDEN,
    RateLimitExceededError: status.HTTP_429_TOO_MANY_REQUESTS,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
}


async def _error_response(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(
        (ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    log = logfire.error if status_code >= 500 else logfire.warn
    log(
        "Request failed",
        error_type=type(exc).__name__,
        error=str(exc),
        status_code=status_code,
        path=request.url.path,
        method=request.method,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code, content={"detail": str(exc)}, headers=headers
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register a handler for every mapped error type."""
    for error_type in ERROR_STATUS:
        app.add_exception_handler(error_type, _error_response)
