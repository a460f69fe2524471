"""HTTP exception handlers.

Every error leaves the API as the same JSON body built from the error
catalog: ``error_code``, ``message``, ``user_message``, ``suggestion`` and
``retry_allowed``. The realtime relay never uses these; it turns failures
into tool-result payloads instead.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from voicebank.config import settings
from voicebank.core.errors import get_error
from voicebank.core.exceptions import VoiceBankError

logger = logging.getLogger(__name__)


def error_body(error_code: str, message: str | None = None) -> dict:
    """Standard error body for ``error_code``; ``message`` overrides the catalog text."""
    entry = get_error(error_code)
    return {
        "error_code": error_code,
        "message": message or entry["message"],
        "user_message": entry["user_message"],
        "suggestion": entry["suggestion"],
        "retry_allowed": entry["retry_allowed"],
    }


def _request_context(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def handle_voicebank_error(request: Request, exc: VoiceBankError) -> JSONResponse:
    """Typed application errors carry their own code and status."""
    extra = {"error_code": exc.error_code, **_request_context(request)}
    if settings.debug:
        extra["details"] = exc.details
    logger.warning(f"Application error: {exc.error_code}", extra=extra)

    return JSONResponse(status_code=exc.http_status, content=error_body(exc.error_code))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body or query failed validation: 400 with one line per field."""
    fields = [
        f"{'.'.join(str(part) for part in error.get('loc', []))}: {error.get('msg', 'Invalid value')}"
        for error in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={"error_code": "VAL_001", **_request_context(request)},
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VAL_001", " | ".join(fields)),
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique violations are conflicts (a registration race); anything else is a 500."""
    # str(exc) carries SQL and bound parameters; it is only inspected, never logged.
    duplicate = any(word in str(exc).lower() for word in ("unique", "duplicate"))
    code = "DB_002" if duplicate else "DB_001"
    logger.error(
        f"Database integrity error on {request.url.path}",
        extra={"error_code": code, **_request_context(request)},
    )

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT if duplicate else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(code),
    )


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the type, hide the details."""
    extra = {"error_code": "SYS_001", "error_type": type(exc).__name__, **_request_context(request)}
    if settings.debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body("SYS_001")
    )
