from __future__ import annotations

from .cors import PermissiveCorsMiddleware
from .request_id import RequestIdMiddleware, request_id_ctx_var

__all__ = [
    "PermissiveCorsMiddleware",
    "RequestIdMiddleware",
    "request_id_ctx_var",
]
