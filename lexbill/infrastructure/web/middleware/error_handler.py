"""
Error handling for the FastAPI application.
Maps use case error results to HTTP responses and catches anything unexpected.
"""

import logging
import traceback
from typing import Any, Dict, NoReturn
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from fastapi import HTTPException, status

from lexbill.config import settings
from lexbill.application.dto.base_dto import ErrorResponseDTO
from lexbill.application.use_cases.base_use_case import UseCaseResult

logger = logging.getLogger(__name__)


ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE_ENTITY": status.HTTP_409_CONFLICT,
    "STORAGE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_result(result: UseCaseResult) -> NoReturn:
    """
    Raise the HTTPException matching a failed use case result.
    Storage failures carry the retryable flag in the body.
    """
    status_code = ERROR_STATUS_CODES.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    metadata = result.metadata or {}

    detail: Dict[str, Any] = {
        "error": result.error_code,
        "message": result.error
    }
    if "field" in metadata:
        detail["field"] = metadata["field"]
    if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        detail["retryable"] = metadata.get("retryable", True)

    raise HTTPException(status_code=status_code, detail=detail)


def unwrap(result: UseCaseResult):
    """Return the data of a successful result or raise its HTTP error."""
    if not result.success:
        raise_for_result(result)
    return result.data


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        # Log the full exception with traceback
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            exc_info=True,
            extra={
                "request_path": request.url.path,
                "request_method": request.method,
                "client_host": request.client.host if request.client else None
            }
        )

        details = None

        # In development, add more debug information
        if settings.debug:
            details = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n")
            }

        error_response = ErrorResponseDTO(
            error="Internal Server Error",
            message="An unexpected error occurred",
            details=details
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response.model_dump(mode="json")
        )
