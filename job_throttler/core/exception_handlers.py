"""Global exception handlers for the inspection API.

Design:
- StoreUnavailableAppError → 503 (backend outage)
- ConfigurationAppError / other AppError → 400
- Unexpected Exception → generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from job_throttler.core.errors import AppError, StoreUnavailableAppError
from job_throttler.core.logging import get_job_id

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle throttler errors with a consistent JSON format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = 400
    if isinstance(exc, StoreUnavailableAppError):
        status_code = 503

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "job_id": get_job_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure and returns a generic message without implementation
    details.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "job_id": get_job_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with a FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
