"""Chat relay: persist inbound chatroom messages and broadcast them."""

import json
import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from app.core.database import SessionLocal

from .mentions import extract_mentions
from .messages import MessageStore
from .models import ChatMessage
from .registry import ConnectionRegistry
from .schemas import CHAT_MESSAGE_EVENT, ChatMessageEvent, ChatMessageOut, NewMessageEnvelope


logger = logging.getLogger("app.chat.relay")


def parse_event(raw: str) -> Optional[ChatMessageEvent]:
    """Decode one inbound frame.

    Returns None for anything that is not a well-formed chat message event:
    invalid JSON, a non-object, an unknown ``type`` or a failed validation.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Dropping non-JSON chat frame: %s", e)
        return None

    if not isinstance(data, dict):
        logger.warning("Dropping chat frame that is not an object")
        return None

    if data.get("type") != CHAT_MESSAGE_EVENT:
        logger.debug("Ignoring chat event of type %r", data.get("type"))
        return None

    try:
        return ChatMessageEvent.model_validate(data)
    except ValidationError as e:
        logger.warning("Dropping invalid chat message event: %s", e.errors(include_url=False))
        return None


def build_envelope(message: ChatMessage) -> Dict[str, Any]:
    envelope = NewMessageEnvelope(message=ChatMessageOut.model_validate(message))
    return envelope.model_dump(mode="json", by_alias=True)


class ChatRelay:
    """Mediates between inbound chat events and the connection registry."""

    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        session_factory: Callable = SessionLocal,
        store: Any = MessageStore,
    ):
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.session_factory = session_factory
        self.store = store

    def _persist(self, event: ChatMessageEvent) -> ChatMessage:
        with self.session_factory() as db:
            return self.store.create_message(
                db,
                sender_id=event.sender_id,
                sender_role=event.sender_role,
                message=event.content,
                tagged_users=extract_mentions(event.content),
            )

    async def handle_event(self, raw: str) -> Optional[ChatMessage]:
        """
        Process one inbound frame to completion.

        Returns the persisted message, or None when the frame was dropped.
        Nothing is sent back to the originating connection on failure.
        """
        event = parse_event(raw)
        if event is None:
            return None

        try:
            saved = await run_in_threadpool(self._persist, event)
        except Exception as e:
            logger.error(
                "Failed to persist chat message from sender_id=%s: %s",
                event.sender_id,
                e,
                exc_info=True,
            )
            return None

        try:
            payload = build_envelope(saved)
        except Exception as e:
            logger.error("Failed to build envelope for message_id=%s: %s", saved.id, e, exc_info=True)
            return None

        sent_count = await self.registry.broadcast(payload)
        logger.info("Relayed message_id=%s to %d connections", saved.id, sent_count)
        return saved
