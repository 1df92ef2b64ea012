from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("device_tracker.errors")

GENERIC_ERROR_MESSAGE = "Internal server error"


class TrackerError(Exception):
    """Base class for failures that map onto an HTTP status and a short message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(TrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request body"


class NotFoundError(TrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InfrastructureError(TrackerError):
    """Database unreachable or a query failed.

    ``message`` is kept for the server log; clients only ever see the generic
    text.
    """

    @property
    def public_message(self) -> str:
        return GENERIC_ERROR_MESSAGE


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__({"error": message}, status_code=status_code, headers=headers)


def _request_context(request: Request) -> dict[str, object]:
    return {"method": request.method, "path": request.url.path}


async def tracker_error_handler(request: Request, exc: TrackerError):
    extra = {"extra_data": {**_request_context(request), "status": exc.status_code}}
    if exc.status_code >= 500:
        logger.error("request.failed: %s", exc.message, extra=extra, exc_info=exc.__cause__ or exc)
    else:
        logger.warning("request.rejected: %s", exc.message, extra=extra)
    return ErrorEnvelope(status_code=exc.status_code, message=exc.public_message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and known paths hit with the wrong verb look the same to clients.
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return ErrorEnvelope(status_code=status.HTTP_404_NOT_FOUND, message="Not found")
    detail = exc.detail if isinstance(exc.detail, str) else "Error"
    return ErrorEnvelope(status_code=exc.status_code, message=detail, headers=getattr(exc, "headers", None))

