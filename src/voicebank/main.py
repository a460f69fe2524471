import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from voicebank.api.middleware.error_handler import (
    handle_generic_error,
    handle_integrity_error,
    handle_validation_error,
    handle_voicebank_error,
)
from voicebank.api.middleware.logging import RequestLoggingMiddleware
from voicebank.api.v1 import router as v1_router
from voicebank.api.v1.health import router as health_router
from voicebank.api.v1.realtime import router as realtime_router
from voicebank.config import settings
from voicebank.core.exceptions import VoiceBankError
from voicebank.core.logger import setup_logging
from voicebank.db.seed import create_tables, seed_demo_data
from voicebank.db.session import AsyncSessionLocal, async_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the ledger handle is opened once and shared by every session
    await create_tables(async_engine)
    if settings.seed_demo_data:
        async with AsyncSessionLocal() as db:
            if not await seed_demo_data(db):
                logger.info("Ledger already populated; skipping demo data")
    if not settings.realtime_api_key:
        logger.warning("REALTIME_API_KEY is not set; relay sessions will fail to connect")
    yield
    # Shutdown
    await async_engine.dispose()
    logger.info("Ledger engine disposed")


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="NovaBank Voice API",
        description="Voice banking relay and ledger",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(VoiceBankError, handle_voicebank_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(v1_router)
    app.include_router(realtime_router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("voicebank.main:app", host=settings.host, port=settings.port, log_config=None)
