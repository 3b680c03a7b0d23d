"""
GigMaster Narrative Engine v1.0 - WebSocket Feed
Session updates for connected clients. Every message is one JSON
envelope: {"event": <kind>, "data": <payload>}.

Kinds:
  state_update  - full session snapshot (on connect and after each action)
  new_event     - an event was queued for the player
  phase_change  - idle <-> await_choice
  log_entry     - one action log line
"""

import json
import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger("gigmaster.web")

MESSAGE_KINDS = ("state_update", "new_event", "phase_change", "log_entry")


def encode_message(kind: str, payload: dict = None) -> str:
    if kind not in MESSAGE_KINDS:
        logger.warning(f"Unregistered message kind '{kind}'")
    return json.dumps({"event": kind, "data": payload or {}}, default=str)


class ConnectionManager:
    """Clients subscribed to one GameSession's updates."""

    def __init__(self):
        self.clients: list[WebSocket] = []

    async def connect(self, ws: WebSocket, snapshot: dict = None):
        """Accept the socket and send it the current session snapshot."""
        await ws.accept()
        self.clients.append(ws)
        logger.debug(f"Client connected ({len(self.clients)} listening)")
        if snapshot is not None:
            await ws.send_text(encode_message("state_update", snapshot))

    def disconnect(self, ws: WebSocket):
        if ws in self.clients:
            self.clients.remove(ws)
            logger.debug(f"Client left ({len(self.clients)} listening)")

    async def broadcast(self, kind: str, payload: dict = None):
        message = encode_message(kind, payload)
        stale = []
        for ws in self.clients:
            try:
                await ws.send_text(message)
            except (RuntimeError, OSError) as e:
                logger.debug(f"Dropping client after failed {kind}: {e}")
                stale.append(ws)
        for ws in stale:
            self.disconnect(ws)

    def broadcast_sync(self, kind: str, payload: dict = None):
        """
        For the session's synchronous callbacks. Schedules the broadcast on
        the running loop; with no loop (CLI, startup) nobody is listening.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        loop.create_task(self.broadcast(kind, payload))

    @property
    def client_count(self) -> int:
        return len(self.clients)
