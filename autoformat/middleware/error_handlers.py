"""Exception handlers for the application."""

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from autoformat.exceptions import AutoFormatException, InputRejection
from autoformat.logging_config import get_logger, log_with_context
from autoformat.models.base_models import ErrorDetail

logger = get_logger(__name__)


def rejection_response(exc: InputRejection) -> PlainTextResponse:
    """Plain-text client error for a body that could not be decoded."""
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def input_rejection_handler(request: Request, exc: InputRejection) -> PlainTextResponse:
    """Turn decoding rejections into 400/422 plain-text responses."""
    log_with_context(
        logger,
        "info",
        "Request body rejected",
        error_code=exc.code.value,
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
        event_type="input_rejected",
    )
    return rejection_response(exc)


async def autoformat_exception_handler(request: Request, exc: AutoFormatException) -> JSONResponse:
    """Handle custom autoformat exceptions with proper HTTP status codes.

    Returns structured JSON error responses with error code, message and
    optional details for client-side error handling.
    """
    log_with_context(
        logger,
        "warning",
        "autoformat error",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
        event_type="autoformat_error",
    )

    error = ErrorDetail(code=exc.code.value, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content={"error": error.model_dump(mode="json")})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with logging."""
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        event_type="unhandled_error",
    )
    logger.error("Exception traceback:", exc_info=exc)

    # Don't expose internal error details to clients
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


def register_error_handlers(app) -> None:
    """Register all exception handlers with the application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(InputRejection, input_rejection_handler)
    app.add_exception_handler(AutoFormatException, autoformat_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
