"""Request logging middleware, PII filter and JSON log formatter.

Emails (looked up via ``?email=``) and card-like digit runs are masked
before anything reaches a log line. The realtime WebSocket route is not an
HTTP request and is logged by the relay itself.
"""

import json
import logging
import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


PII_PATTERNS = [
    # Card numbers: 13-19 digits, optionally grouped by spaces or dashes
    (re.compile(r'\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{1,7}\b'), '[CARD]'),
    # Email addresses, including a URL-encoded @
    (re.compile(r'\b[A-Za-z0-9._%+-]+(?:@|%40)[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
    # International phone numbers
    (re.compile(r'\+\d{1,3}[-.\s]?\(?\d{2,4}\)?[-.\s]?\d{3,4}[-.\s]?\d{4,5}'), '[PHONE]'),
]

# LogRecord attributes copied into the JSON payload when present
EXTRA_FIELDS = (
    "request_id",
    "user_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "error_code",
    "error_type",
    "client_ip",
    "tool",
    "call_id",
    "success",
    "operation",
    "timeout_seconds",
)


def filter_pii(text: str) -> str:
    """Replace PII in ``text`` with placeholders such as ``[EMAIL]``."""
    if not text:
        return text
    for pattern, replacement in PII_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs start and end of every HTTP request and tags it with ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": filter_pii(str(request.url)),
        }

        started = time.perf_counter()
        logger.info(
            "Request started",
            extra={**context, "client_ip": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed",
                extra={**context, "duration_ms": _elapsed_ms(started), "error_type": type(exc).__name__},
            )
            raise

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request completed",
            extra={**context, "status_code": response.status_code, "duration_ms": _elapsed_ms(started)},
        )
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class JSONLogFormatter(logging.Formatter):
    """One JSON object per log line, PII-filtered."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": filter_pii(record.getMessage()),
        }

        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        if record.exc_info:
            log_data["exception"] = filter_pii(self.formatException(record.exc_info))

        return json.dumps(log_data, default=str)
