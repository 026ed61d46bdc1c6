"""
Shared error responses for API routes
"""
from typing import Optional

from fastapi.responses import JSONResponse

from app.core.errors import NotFoundError, TipsterError
from app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

INTERNAL_ERROR_PREFIX = "An internal server error occurred: "


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def handle_route_error(exc: Exception, action: str, prefix: Optional[str] = None) -> JSONResponse:
    """
    Map an exception raised inside a route body to a JSON error response

    Not-found and other typed service errors keep their status code;
    everything else is logged and answered with 500. The prefix only
    applies to 500 responses.
    """
    if isinstance(exc, NotFoundError):
        return error_response(exc.status_code, exc.message)

    message = exc.message if isinstance(exc, TipsterError) else str(exc)
    status_code = exc.status_code if isinstance(exc, TipsterError) else 500

    logger.error(
        f"Failed to {action}: {message}",
        exc_info=True,
        extra={"error_type": type(exc).__name__}
    )
    if prefix and status_code == 500:
        message = f"{prefix}{message}"
    return error_response(status_code, message)
