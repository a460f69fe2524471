"""Realtime voice relay WebSocket endpoint."""

import logging

from fastapi import APIRouter, Depends, Query, WebSocket
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voicebank.api.deps import get_session_factory
from voicebank.config import settings
from voicebank.realtime.dispatcher import ToolDispatcher
from voicebank.realtime.session import RelaySession, connect_upstream

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def get_upstream_connector():
    return connect_upstream


@router.websocket("/ws/realtime")
async def realtime_relay(
    websocket: WebSocket,
    user_id: str | None = Query(None, description="Ledger owner for tool calls"),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    connector=Depends(get_upstream_connector),
):
    """
    Bridge the browser to the realtime endpoint.

    Tool calls run against ``user_id``'s ledger (the configured default user
    when omitted). The channel itself is not authenticated.
    """
    await websocket.accept()
    owner = user_id or settings.default_user_id
    logger.info("Relay client connected", extra={"user_id": owner})

    dispatcher = ToolDispatcher(session_factory, owner)
    await RelaySession(websocket, dispatcher, connector=connector).run()
