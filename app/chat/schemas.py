"""Wire shapes for the chatroom transport and history endpoint."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


SenderRole = Literal["customer", "admin", "superadmin"]

CHAT_MESSAGE_EVENT = "chat_message"
NEW_MESSAGE_EVENT = "new_message"


class ChatMessageEvent(BaseModel):
    """Inbound event sent by a client session."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["chat_message"] = CHAT_MESSAGE_EVENT
    sender_id: str = Field(alias="senderId")
    sender_role: SenderRole = Field(alias="senderRole")
    content: str


class SenderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    profile_image_url: Optional[str] = Field(default=None, alias="profileImageUrl")
    branch_id: Optional[int] = Field(default=None, alias="branchId")


class ChatMessageOut(BaseModel):
    """A persisted chat message as broadcast to clients."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    sender_id: str = Field(alias="senderId")
    sender_role: str = Field(alias="senderRole")
    message: str
    tagged_users: List[str] = Field(default_factory=list, alias="taggedUsers")
    created_at: datetime = Field(alias="createdAt")


class ChatMessageWithSender(ChatMessageOut):
    """History entry, with the sender's identity joined in."""

    sender: Optional[SenderOut] = None


class NewMessageEnvelope(BaseModel):
    type: Literal["new_message"] = NEW_MESSAGE_EVENT
    message: ChatMessageOut


class UserOut(SenderOut):
    email: Optional[str] = None
    role: str
