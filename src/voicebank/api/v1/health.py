"""Liveness and readiness probes."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.config import settings
from voicebank.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready(db: AsyncSession = Depends(get_db)):
    """
    Ready when the ledger database answers.

    ``realtime_configured`` reports whether an endpoint key is set; relay
    sessions fail with close code 1011 without one, but HTTP still works.
    """
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Readiness check failed", extra={"error_type": type(exc).__name__})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "database": "disconnected", "error": type(exc).__name__},
        )
    return {
        "status": "ready",
        "database": "connected",
        "realtime_configured": bool(settings.realtime_api_key),
    }
