"""
Error Handlers

Render every failure as {"error": {code, kind, message, details}}.
Domain errors carry their own HTTP status: 403 for UnauthorizedError,
404 for unknown workflows/states/actions/payloads, 409 for conflicts,
400 for invalid input.
"""

from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...domain.enums import WorkflowErrorKind
from ...domain.errors import DomainError
from ...utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)


def _error_response(status_code: int, body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers={"X-Correlation-Id": get_correlation_id() or ""}
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Expected engine/service failures: unknown ids, missing roles, lost races"""
    logger.warning(
        f"{exc.error_code}: {exc.message}",
        extra={"error_code": exc.error_code, "path": request.url.path, "status_code": exc.http_status}
    )
    return _error_response(exc.http_status, exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body or parameters do not match the route's models"""
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        f"Request validation failed with {len(errors)} error(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path, "method": request.method}
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        {
            "error": {
                "code": "VALIDATION_ERROR",
                "kind": WorkflowErrorKind.DOMAIN.value,
                "message": "Request validation failed",
                "details": {"errors": errors}
            }
        }
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {
            "error": {
                "code": "INTERNAL_ERROR",
                "kind": WorkflowErrorKind.DOMAIN.value,
                "message": "An unexpected error occurred",
                "details": {}
            }
        }
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
