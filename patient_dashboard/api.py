"""
Central API router and utilities for the patient dashboard.

This module provides:
- A central router that includes every enabled resource router
- The standard response envelope
- Exception handlers that render every failure in that envelope
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from patient_dashboard.common.exceptions import (
    DashboardError,
    InternalError,
    RateLimitExceededError,
    UnauthenticatedError,
    ValidationFailedError
)
from patient_dashboard.common.logger import app_logger
from patient_dashboard.common.pagination import PaginationMeta
from patient_dashboard.common.utils import isoformat, utcnow

# Configure logging
logger = app_logger.getChild("api")


def register_resource_module(main_router: APIRouter, name: str, router: APIRouter) -> None:
    """
    Register a resource router with the main API router.

    Args:
        main_router: Router mounted under the API prefix
        name: Path segment and tag of the resource
        router: FastAPI router for the resource
    """
    main_router.include_router(router, prefix=f"/{name}", tags=[name])
    logger.info(f"Registered resource module: {name} with {len(router.routes)} routes")


class APIResponse:
    """Standard API response structure"""

    @staticmethod
    def success(
        data: Any = None,
        message: str = "Success",
        pagination: Optional[PaginationMeta] = None,
    ) -> Dict[str, Any]:
        """
        Create a success response.

        Args:
            data: Response data
            message: Success message
            pagination: Pagination metadata for list responses

        Returns:
            Response dictionary
        """
        response: Dict[str, Any] = {
            "success": True,
            "message": message,
        }
        if data is not None:
            response["data"] = data
        if pagination is not None:
            response["pagination"] = pagination.to_dict()
        response["timestamp"] = isoformat(utcnow())
        return response

    @staticmethod
    def error(
        message: str,
        error: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        """
        Create an error response.

        Args:
            message: Error message
            error: Short error label
            errors: Optional per-field errors

        Returns:
            Response dictionary
        """
        response: Dict[str, Any] = {
            "success": False,
            "message": message,
        }
        if error:
            response["error"] = error
        if errors:
            response["errors"] = errors
        response["timestamp"] = isoformat(utcnow())
        return response


def respond(
    data: Any = None,
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
    pagination: Optional[PaginationMeta] = None,
) -> JSONResponse:
    """Render a success envelope."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(APIResponse.success(data, message, pagination)),
    )


def _field_name(location: Any) -> str:
    parts = [str(part) for part in location if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from validators
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    """
    Render an application error in the standard envelope.

    Internal errors never expose their message.
    """
    headers: Dict[str, str] = {}
    if isinstance(exc, UnauthenticatedError):
        headers["WWW-Authenticate"] = "Bearer"
    if isinstance(exc, RateLimitExceededError):
        headers["Retry-After"] = str(exc.retry_after)

    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
            exc_info=exc.original_exception or exc,
        )
        body = APIResponse.error(InternalError.error, error=InternalError.error)
    else:
        errors = exc.errors if isinstance(exc, ValidationFailedError) else None
        body = APIResponse.error(exc.message, error=exc.error, errors=errors)

    return JSONResponse(status_code=exc.status_code, content=body, headers=headers or None)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle validation errors and return a standardized response.

    Args:
        request: The incoming request
        exc: The validation exception

    Returns:
        A JSON response with per-field error details
    """
    error_details = []
    for error in exc.errors():
        error_details.append({
            "field": _field_name(error.get("loc", [])),
            "message": _clean_message(error.get("msg", "Invalid value")),
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=APIResponse.error(
            "Validation failed",
            error=ValidationFailedError.error,
            errors=error_details,
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) in the envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=APIResponse.error(message, error=message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the fault and answer with a generic 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=APIResponse.error(InternalError.error, error=InternalError.error),
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register every exception handler on the application."""
    app.add_exception_handler(DashboardError, dashboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
