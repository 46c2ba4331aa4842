"""Exception handlers turning client errors into dismissable API notices."""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import (
    IncompleteBinding,
    InvalidEndpoint,
    NotificationClientError,
    StateError,
)

logger = logging.getLogger(__name__)


def _status_for(exc: Exception) -> int:
    if isinstance(exc, InvalidEndpoint):
        # Misconfigured base URL
        return 500
    if isinstance(exc, NotificationClientError):
        return 502
    if isinstance(exc, IncompleteBinding):
        return 409
    return 400


async def notification_client_error_handler(request: Request, exc: NotificationClientError):
    """Failures of the notification service: transport, status, decoding, endpoint."""
    status_code = _status_for(exc)
    logger.error(f"Notification service error: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


async def state_error_handler(request: Request, exc: StateError):
    """Local state does not allow the action (no user ID, incomplete binding)."""
    logger.warning(f"Rejected {request.url.path}: {exc}")
    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def setup_error_handlers(app: FastAPI):
    app.add_exception_handler(NotificationClientError, notification_client_error_handler)
    app.add_exception_handler(StateError, state_error_handler)
