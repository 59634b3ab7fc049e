"""Registry of open chatroom WebSocket connections."""

import asyncio
import logging
from typing import Any, Dict, List, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState


logger = logging.getLogger("app.chat.registry")


def is_open(websocket: WebSocket) -> bool:
    """True when both sides of the handshake are complete and neither closed."""
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """Tracks open connections to the chat endpoint and fans out payloads."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self.active_connections)

    def __contains__(self, websocket: object) -> bool:
        return websocket in self.active_connections

    def register(self, websocket: WebSocket) -> None:
        """Add a connection whose handshake has completed."""
        self.active_connections.add(websocket)
        logger.info("Client connected to chat: total_connections=%d", len(self.active_connections))

    def unregister(self, websocket: WebSocket) -> None:
        """Remove a connection. Safe to call for unknown or already removed sockets."""
        if websocket not in self.active_connections:
            return
        self.active_connections.discard(websocket)
        logger.info("Client disconnected from chat: total_connections=%d", len(self.active_connections))

    async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> bool:
        try:
            await websocket.send_json(payload)
            return True
        except RuntimeError as e:
            logger.warning("Failed to send chat payload, dropping connection: %s", e)
        except Exception as e:
            logger.error("Unexpected error sending chat payload: %s", e, exc_info=True)
        self.unregister(websocket)
        return False

    async def broadcast(self, payload: Dict[str, Any]) -> int:
        """
        Send a JSON payload to every open connection.

        Connections that are still connecting or already closing are skipped.
        Sends run concurrently and have all finished when this returns.

        Returns:
            Number of connections that received the payload
        """
        targets: List[WebSocket] = [ws for ws in list(self.active_connections) if is_open(ws)]
        if not targets:
            return 0

        results = await asyncio.gather(*(self._send(ws, payload) for ws in targets))
        sent_count = sum(1 for delivered in results if delivered)

        logger.debug("Broadcast delivered to %d of %d connections", sent_count, len(targets))
        return sent_count
