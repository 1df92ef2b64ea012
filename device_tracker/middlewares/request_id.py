from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger("device_tracker.request")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and log one line per request.

    ``request.completed`` is written for every answered request (device
    actions included, since they are plain POSTs); ``request.failed`` is
    written when an exception escapes the inner stack, before re-raising.
    """

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    def _log_fields(self, request: Request, request_id: str, start: float) -> dict[str, object]:
        return {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid4())
        token = request_id_ctx_var.set(request_id)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("request.failed", extra={"extra_data": self._log_fields(request, request_id, start)})
                raise
            fields = self._log_fields(request, request_id, start)
            fields["status"] = response.status_code
            response.headers[self.header_name] = request_id
            response.headers.setdefault("X-Response-Time", f"{fields['duration_ms']:.2f}ms")
            logger.info("request.completed", extra={"extra_data": fields})
        finally:
            request_id_ctx_var.reset(token)
        return response
