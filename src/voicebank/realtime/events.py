"""Realtime API event types and builders used by the relay."""

import json

from voicebank.realtime.tools import TOOL_DEFINITIONS

SESSION_UPDATE = "session.update"
FUNCTION_CALL_ARGUMENTS_DONE = "response.function_call_arguments.done"
CONVERSATION_ITEM_CREATE = "conversation.item.create"
RESPONSE_CREATE = "response.create"

MODALITIES = ["audio", "text"]


def session_update(instructions: str) -> dict:
    """One-time session configuration declaring instructions and tools."""
    return {
        "type": SESSION_UPDATE,
        "session": {
            "modalities": list(MODALITIES),
            "instructions": instructions,
            "tools": TOOL_DEFINITIONS,
        },
    }


def function_call_output(call_id: str, result: dict) -> dict:
    """Conversation item carrying a tool result back to the assistant."""
    return {
        "type": CONVERSATION_ITEM_CREATE,
        "item": {
            "type": "function_call_output",
            "call_id": call_id,
            "output": json.dumps(result),
        },
    }


def response_create() -> dict:
    return {"type": RESPONSE_CREATE}
