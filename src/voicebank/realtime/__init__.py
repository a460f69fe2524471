"""Realtime relay between the browser and the conversational AI endpoint.

Modules:
    tools.py       -> function-calling tool declarations
    events.py      -> realtime event types and builders
    dispatcher.py  -> tool call -> ledger operation
    session.py     -> per-connection duplex relay
"""

from voicebank.realtime.dispatcher import ToolDispatcher
from voicebank.realtime.session import RelaySession, RelayState

__all__ = ["ToolDispatcher", "RelaySession", "RelayState"]
