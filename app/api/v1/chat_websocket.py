"""WebSocket endpoint for the real-time chatroom."""

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from jose import JWTError

from app.api.dependencies import get_active_user
from app.chat.relay import ChatRelay
from app.core import messages
from app.core.security import get_token_subject
from app.models.user import User


logger = logging.getLogger("app.chat.websocket")

router = APIRouter(tags=["chat"])


async def get_current_user_ws(
    websocket: WebSocket,
    token: str | None,
    relay: ChatRelay,
) -> User | None:
    """Authenticate a WebSocket connection via query parameter token."""
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=messages.WS_TOKEN_INVALID)
        return None

    try:
        user_id = get_token_subject(token)
    except JWTError as e:
        logger.warning("WebSocket authentication failed: %s", e)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=messages.WS_TOKEN_INVALID)
        return None

    with relay.session_factory() as db:
        user = get_active_user(db, user_id)

    if not user:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=messages.WS_USER_NOT_FOUND)
        return None

    return user


@router.websocket("/ws")
async def chat_websocket(
    websocket: WebSocket,
    token: str | None = Query(default=None),
):
    """
    WebSocket endpoint for the shared chatroom.

    Connection URL: ws://localhost:8000/api/ws?token={access_token}

    Message Format (Client → Server):
    {
        "type": "chat_message",
        "senderId": "...",
        "senderRole": "customer" | "admin" | "superadmin",
        "content": "Message text with @mentions"
    }

    Message Format (Server → Client):
    {
        "type": "new_message",
        "message": {...ChatMessage...}
    }

    Nothing else is ever sent back: frames that cannot be parsed or persisted
    are dropped without a reply.
    """
    relay: ChatRelay = websocket.app.state.chat_relay

    user = await get_current_user_ws(websocket, token, relay)
    if not user:
        return  # Connection already closed

    await websocket.accept()
    relay.registry.register(websocket)
    logger.info("Chat connection opened: user_id=%s", user.id)

    try:
        # One frame at a time: each event is persisted and broadcast
        # before the next frame from this connection is read
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            data = frame.get("text")
            if data is None:
                data = (frame.get("bytes") or b"").decode("utf-8", errors="replace")

            await relay.handle_event(data)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error: user_id=%s: %s", user.id, e, exc_info=True)
    finally:
        relay.registry.unregister(websocket)
        logger.info("Chat connection closed: user_id=%s", user.id)
