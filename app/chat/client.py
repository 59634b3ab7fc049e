"""Client-side chatroom session.

One ``ChatClientSession`` mirrors one browser tab: it opens a single
connection to the chat endpoint, loads one page of history over HTTP and
appends every ``new_message`` broadcast it receives while open. Sends are
fire-and-forget; a sent message shows up in the view only when the relay's
broadcast of the persisted message comes back.
"""

import asyncio
import enum
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlencode

import httpx
import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from .schemas import CHAT_MESSAGE_EVENT, NEW_MESSAGE_EVENT


logger = logging.getLogger("app.chat.client")


class SessionState(str, enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


def describe_sender(message: Dict[str, Any]) -> str:
    """Display label for a history or broadcast entry, by sender role."""
    sender = message.get("sender") or {}
    full_name = " ".join(
        part for part in (sender.get("firstName"), sender.get("lastName")) if part
    )
    role = message.get("senderRole")

    if role == "superadmin":
        return f"SuperAdmin • {full_name}".rstrip(" •")
    if role == "admin":
        return f"Admin • {full_name}".rstrip(" •")
    if role == "customer":
        return full_name or "Customer"
    return "User"


class ChatClientSession:
    """One client's connection to the chatroom and its local view."""

    def __init__(
        self,
        ws_url: str,
        api_url: str,
        token: str,
        sender_id: str,
        sender_role: str,
        connect: Callable[[str], Awaitable[Any]] = websockets.connect,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.ws_url = ws_url
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.sender_id = sender_id
        self.sender_role = sender_role
        self._connect = connect
        self._http_client = http_client

        self.state = SessionState.CONNECTING
        self.history: List[Dict[str, Any]] = []
        self.live_messages: List[Dict[str, Any]] = []
        self._history_loaded = False
        self._connection: Any = None
        self._listener: Optional[asyncio.Task] = None

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.OPEN

    @property
    def view(self) -> List[Dict[str, Any]]:
        """History page followed by live messages, in arrival order.

        Entries are not de-duplicated: a message broadcast while the history
        request was in flight can appear in both parts.
        """
        return self.history + self.live_messages

    async def connect(self) -> bool:
        """Open the transport. Returns True once the session is open."""
        if self.state is not SessionState.CONNECTING or self._connection is not None:
            return self.is_connected

        url = f"{self.ws_url}?{urlencode({'token': self.token})}"
        try:
            self._connection = await self._connect(url)
        except (OSError, InvalidHandshake, InvalidURI, asyncio.TimeoutError) as e:
            logger.warning("Chat handshake failed: %s", e)
            self.state = SessionState.CLOSED
            return False

        self.state = SessionState.OPEN
        logger.info("Connected to chat: sender_id=%s", self.sender_id)
        self._listener = asyncio.create_task(self._listen())
        return True

    async def _listen(self) -> None:
        try:
            async for raw in self._connection:
                try:
                    self._on_frame(raw)
                except Exception as e:
                    logger.error("Error handling chat frame: %s", e, exc_info=True)
        except ConnectionClosed as e:
            logger.info("Chat connection closed: %s", e)
        finally:
            self.state = SessionState.CLOSED
            logger.info("Disconnected from chat: sender_id=%s", self.sender_id)

    def _on_frame(self, raw: Any) -> None:
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Error parsing chat frame: %s", e)
            return

        if not isinstance(data, dict) or data.get("type") != NEW_MESSAGE_EVENT:
            return

        message = data.get("message")
        if not isinstance(message, dict):
            logger.warning("Ignoring new_message frame without a message body")
            return
        self.live_messages.append(message)

    async def send(self, content: str) -> bool:
        """Send a chat message. A no-op unless open and ``content`` is not blank."""
        if self.state is not SessionState.OPEN or self._connection is None:
            return False

        text = (content or "").strip()
        if not text:
            return False

        event = {
            "type": CHAT_MESSAGE_EVENT,
            "senderId": self.sender_id,
            "senderRole": self.sender_role,
            "content": text,
        }
        try:
            await self._connection.send(json.dumps(event))
        except ConnectionClosed as e:
            logger.warning("Chat send failed, connection closed: %s", e)
            self.state = SessionState.CLOSED
            return False
        return True

    def load_history(self, messages: List[Dict[str, Any]]) -> None:
        """Set the history page (oldest first) once."""
        if self._history_loaded:
            return
        self.history = list(messages)
        self._history_loaded = True

    async def fetch_history(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Fetch the newest ``limit`` messages, oldest first, once per session."""
        if self._history_loaded:
            return self.history

        headers = {"Authorization": f"Bearer {self.token}"}
        params = {"limit": limit}
        if self._http_client is not None:
            response = await self._http_client.get(f"{self.api_url}/messages", params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(f"{self.api_url}/messages", params=params, headers=headers)
        response.raise_for_status()

        self.load_history(response.json())
        return self.history

    async def close(self) -> None:
        if self._connection is not None and self.state is not SessionState.CLOSED:
            await self._connection.close()
        self.state = SessionState.CLOSED
        if self._listener is not None:
            await self._listener
            self._listener = None
