"""Error handling middleware.

Every error leaves the service as ``{"data": null, "message": str, "code": int}``.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

from auth_api.core.exceptions import AppException

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the uniform error body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "data": None,
            "message": message,
            "code": status_code,
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Operational errors are returned verbatim; anything else is collapsed to a
    generic 500.
    """
    if not exc.is_operational:
        logger.error(
            "non_operational_error",
            error=exc.__class__.__name__,
            message=exc.message,
            path=request.url.path,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    logger.warning(
        "app_error",
        error=exc.__class__.__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions."""
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle validation errors."""
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    logger.info("request_validation_failed", path=request.url.path, fields=fields)

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        f"Request validation failed: {', '.join(fields)}" if fields else "Request validation failed",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Full details go to the server log; the client gets a generic message.
    """
    logger.exception(
        "unhandled_exception",
        error=exc.__class__.__name__,
        path=request.url.path,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
