"""Message persistence for the chatroom."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import ChatMessage


logger = logging.getLogger("app.chat.messages")


class MessageStore:
    """Creates, lists and deletes chatroom messages."""

    @staticmethod
    def create_message(
        db: Session,
        sender_id: str,
        sender_role: str,
        message: str,
        tagged_users: Optional[List[str]] = None,
    ) -> ChatMessage:
        """Insert a new message; id and created_at are assigned by the database."""
        chat_message = ChatMessage(
            sender_id=sender_id,
            sender_role=sender_role,
            message=message,
            tagged_users=list(tagged_users or []),
        )

        db.add(chat_message)
        db.commit()
        db.refresh(chat_message)

        logger.info(
            "Message created: message_id=%s, sender_id=%s, role=%s, tagged=%d",
            chat_message.id,
            sender_id,
            sender_role,
            len(chat_message.tagged_users),
        )

        return chat_message

    @staticmethod
    def get_all_messages(db: Session, limit: int = 50) -> List[ChatMessage]:
        """Return the newest ``limit`` messages, newest first, senders joined."""
        return (
            db.query(ChatMessage)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_message(db: Session, message_id: int) -> Optional[ChatMessage]:
        return db.query(ChatMessage).filter(ChatMessage.id == message_id).first()

    @staticmethod
    def delete_message(db: Session, message_id: int) -> bool:
        """Delete a message. Returns False if it does not exist."""
        chat_message = MessageStore.get_message(db, message_id)
        if not chat_message:
            return False

        db.delete(chat_message)
        db.commit()

        logger.info("Message deleted: message_id=%s", message_id)
        return True
