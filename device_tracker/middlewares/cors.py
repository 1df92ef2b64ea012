from __future__ import annotations

import logging

from starlette import status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.errors import GENERIC_ERROR_MESSAGE, ErrorEnvelope

logger = logging.getLogger("device_tracker.errors")


class PermissiveCorsMiddleware(BaseHTTPMiddleware):
    """Attach open cross-origin headers and short-circuit every OPTIONS request.

    Unexpected exceptions are rendered here as the JSON 500 envelope, so a
    crashed request still carries the CORS headers the page needs to read it.
    """

    def __init__(
        self,
        app,  # type: ignore[no-untyped-def]
        allow_origin: str = "*",
        allow_methods: str = "GET, POST, OPTIONS",
        allow_headers: str = "Content-Type",
    ) -> None:
        super().__init__(app)
        self.cors_headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": allow_methods,
            "Access-Control-Allow-Headers": allow_headers,
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_204_NO_CONTENT)
        else:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "request.crashed",
                    extra={"extra_data": {"method": request.method, "path": request.url.path}},
                )
                response = ErrorEnvelope(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    message=GENERIC_ERROR_MESSAGE,
                )
        for name, value in self.cors_headers.items():
            response.headers.setdefault(name, value)
        return response
