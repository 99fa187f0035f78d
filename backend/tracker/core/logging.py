from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tracker.core.security import principal_from_token

# Structured ``extra`` keys copied onto every JSON line when present.
LOG_FIELDS = (
    "request_id",
    "username",
    "path",
    "method",
    "params",
    "status_code",
    "latency_ms",
    "store",
    "requested_date",
    "used_date",
)

DENIED_STATUSES = (401, 403)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({key: getattr(record, key) for key in LOG_FIELDS if hasattr(record, key)})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _bearer_username(request: Request) -> Optional[str]:
    scheme, _, token = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    principal = principal_from_token(token.strip())
    return principal.username if principal else None


def _request_context(request: Request, request_id: str) -> dict[str, Any]:
    # Filter names only; values may carry usernames or file names.
    return {
        "request_id": request_id,
        "path": request.url.path,
        "method": request.method,
        "params": sorted(request.query_params.keys()),
        "username": _bearer_username(request),
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``request`` line per call; denied tracker reads also go to ``security``."""

    def __init__(self, app, logger_name: str = "request") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)
        self.security_logger = logging.getLogger("security")

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        context = _request_context(request, request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            context["latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
            self.logger.exception("unhandled_exception", extra=context)
            raise

        context["status_code"] = response.status_code
        context["latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        self.logger.info("request", extra=context)
        if response.status_code in DENIED_STATUSES and request.url.path.startswith("/api/tracker"):
            self.security_logger.info("tracker_access_denied", extra=context)

        response.headers["X-Request-Id"] = request_id
        return response
