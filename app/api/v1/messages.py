"""Chatroom history endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_user, require_roles
from app.chat.messages import MessageStore
from app.chat.schemas import ChatMessageWithSender
from app.core import messages
from app.core.config import settings
from app.core.database import get_db
from app.models.user import STAFF_ROLES, User


logger = logging.getLogger("app.api.messages")

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=List[ChatMessageWithSender])
def list_messages(
    limit: int = Query(settings.CHAT_HISTORY_DEFAULT_LIMIT, ge=1, le=settings.CHAT_HISTORY_MAX_LIMIT),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the newest ``limit`` messages, oldest first."""
    chat_messages = MessageStore.get_all_messages(db, limit=limit)
    chat_messages.reverse()
    return chat_messages


@router.delete("/{message_id}")
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(list(STAFF_ROLES))),
):
    """Delete a message.

    Connected clients are not notified; they see the deletion the next time
    they fetch the history page.
    """
    if not MessageStore.delete_message(db, message_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=messages.CHAT_MESSAGE_NOT_FOUND,
        )

    logger.info("Message %s deleted by user_id=%s", message_id, current_user.id)
    return {"message": messages.CHAT_MESSAGE_DELETED}
