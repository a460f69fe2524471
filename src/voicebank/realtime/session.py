"""Relay session: one browser WebSocket bridged to one realtime endpoint socket.

Protocol:
  Browser -> Server -> Endpoint:
    - any realtime event (audio chunks, text, control), forwarded unmodified
  Endpoint -> Server -> Browser:
    - every event forwarded unmodified, except
      ``response.function_call_arguments.done``, which is answered here with
      ``conversation.item.create`` (function_call_output) + ``response.create``
      and never reaches the browser
"""

import asyncio
import enum
import json
import logging
from typing import Any, Awaitable, Callable

import websockets
from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from voicebank.config import settings
from voicebank.realtime import events
from voicebank.realtime.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

UpstreamConnector = Callable[[], Awaitable[Any]]


class RelayState(str, enum.Enum):
    CONNECTING = "connecting"
    READY = "ready"
    RELAYING = "relaying"
    TOOL_PENDING = "tool_pending"
    CLOSED = "closed"


def upstream_headers() -> dict[str, str]:
    """Auth headers for the realtime endpoint."""
    headers = {"OpenAI-Beta": "realtime=v1"}
    if settings.realtime_auth_style == "openai":
        headers["Authorization"] = f"Bearer {settings.realtime_api_key}"
    else:
        headers["api-key"] = settings.realtime_api_key
    return headers


async def connect_upstream():
    """Open the realtime endpoint socket with the configured credentials."""
    return await websockets.connect(
        settings.realtime_url,
        additional_headers=upstream_headers(),
        max_size=None,
    )


class RelaySession:
    """
    Manages the lifecycle of a single relay connection:
      connecting -> ready -> relaying <-> tool_pending -> closed
    """

    def __init__(
        self,
        client: WebSocket,
        dispatcher: ToolDispatcher,
        connector: UpstreamConnector = connect_upstream,
        instructions: str | None = None,
    ):
        self.client = client
        self.dispatcher = dispatcher
        self.connector = connector
        self.instructions = instructions or settings.realtime_instructions
        self.upstream = None
        self.state = RelayState.CONNECTING

    async def run(self) -> None:
        """Relay until either peer goes away. Connection loss is terminal."""
        try:
            self.upstream = await self.connector()
        except (OSError, websockets.WebSocketException, asyncio.TimeoutError) as exc:
            logger.error(
                "Realtime endpoint connection failed",
                extra={"error_type": type(exc).__name__, "user_id": self.dispatcher.user_id},
            )
            await self._close_client(code=1011)
            self.state = RelayState.CLOSED
            return

        logger.info("Realtime endpoint connected", extra={"user_id": self.dispatcher.user_id})
        try:
            await self._send_upstream(events.session_update(self.instructions))
            # The client socket is only read from here on, so frames sent
            # before the session is configured wait in its receive queue.
            self.state = RelayState.READY

            self.state = RelayState.RELAYING
            pumps = [
                asyncio.create_task(self._pump_client(), name="relay-client"),
                asyncio.create_task(self._pump_upstream(), name="relay-upstream"),
            ]
            done, pending = await asyncio.wait(pumps, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in done:
                exc = task.exception()
                if exc is not None and not isinstance(
                    exc, (WebSocketDisconnect, websockets.ConnectionClosed)
                ):
                    logger.error(
                        "Relay pump failed",
                        extra={"pump": task.get_name(), "error_type": type(exc).__name__},
                    )
        except websockets.ConnectionClosed:
            logger.info("Realtime endpoint closed during setup")
        finally:
            await self.close()

    async def close(self) -> None:
        """Close both sides; safe to call more than once."""
        if self.state == RelayState.CLOSED:
            return
        self.state = RelayState.CLOSED
        if self.upstream is not None:
            await self.upstream.close()
        await self._close_client()
        logger.info("Relay session closed", extra={"user_id": self.dispatcher.user_id})

    async def _close_client(self, code: int = 1000) -> None:
        if self.client.client_state == WebSocketState.CONNECTED:
            try:
                await self.client.close(code=code)
            except RuntimeError:
                # Close raced with the peer's own disconnect
                logger.debug("Client socket already closed")

    async def _send_upstream(self, event: dict) -> None:
        await self.upstream.send(json.dumps(event))

    async def _pump_client(self) -> None:
        """Forward client frames upstream unmodified."""
        while True:
            message = await self.client.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("Client disconnected", extra={"user_id": self.dispatcher.user_id})
                return
            data = message.get("text")
            if data is None:
                data = message.get("bytes")
            if data is not None:
                await self.upstream.send(data)

    async def _pump_upstream(self) -> None:
        """Forward endpoint frames to the client, intercepting tool calls."""
        async for raw in self.upstream:
            await self.handle_upstream_message(raw)
        logger.info("Realtime endpoint disconnected", extra={"user_id": self.dispatcher.user_id})

    async def handle_upstream_message(self, raw: str | bytes) -> None:
        try:
            event = json.loads(raw)
        except (TypeError, ValueError):
            event = None
        if not isinstance(event, dict):
            logger.warning("Non-JSON frame from realtime endpoint; forwarding as-is")
            await self._send_client(raw)
            return

        if event.get("type") == events.FUNCTION_CALL_ARGUMENTS_DONE:
            await self.handle_tool_call(event)
        else:
            await self._send_client(raw)

    async def handle_tool_call(self, event: dict) -> None:
        """Dispatch the call and feed its result back before resuming."""
        call_id = event.get("call_id")
        if not call_id:
            logger.error("Dropping tool call without call_id", extra={"error_code": "PROTO_001"})
            return

        self.state = RelayState.TOOL_PENDING
        name = event.get("name")
        result = await self.dispatcher.dispatch(name, event.get("arguments"))
        logger.info(
            "Tool result injected",
            extra={"tool": name, "call_id": call_id, "success": result.get("success", False)},
        )
        await self._send_upstream(events.function_call_output(call_id, result))
        await self._send_upstream(events.response_create())
        self.state = RelayState.RELAYING

    async def _send_client(self, raw: str | bytes) -> None:
        if isinstance(raw, bytes):
            await self.client.send_bytes(raw)
        else:
            await self.client.send_text(raw)
