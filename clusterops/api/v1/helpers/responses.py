"""
Standardized error responses and the mapping from store errors to HTTP.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from clusterops.exceptions import (
    ConstraintError,
    ExecutionAlreadyClosedError,
    NotFoundError,
    QueryCancelledError,
    StoreConnectionError,
    TelemetryStoreError,
)

logger = logging.getLogger(__name__)


class APIResponse(BaseModel):
    """Standard API response model"""

    success: bool
    message: str
    errors: list[str] | None = None


STATUS_BY_ERROR: list[tuple[type[TelemetryStoreError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ExecutionAlreadyClosedError, status.HTTP_409_CONFLICT),
    (ConstraintError, status.HTTP_409_CONFLICT),
    (StoreConnectionError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (QueryCancelledError, status.HTTP_504_GATEWAY_TIMEOUT),
]


def error_response(
    message: str = "An error occurred",
    errors: list[str] | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> JSONResponse:
    """Create an error response"""
    body = APIResponse(success=False, message=message, errors=errors or [])
    return JSONResponse(status_code=status_code, content=body.model_dump())


def not_found_response(message: str = "Resource not found") -> JSONResponse:
    return error_response(message=message, status_code=status.HTTP_404_NOT_FOUND)


async def store_error_handler(request: Request, exc: TelemetryStoreError) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_cls, code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            status_code = code
            break
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(
        message=type(exc).__name__, errors=[str(exc)], status_code=status_code
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TelemetryStoreError, store_error_handler)
