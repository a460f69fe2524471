"""API version 1 routes."""

from fastapi import APIRouter

from voicebank.api.v1 import users

router = APIRouter(prefix="/api/v1")

# Include routers
router.include_router(users.router)
