"""Chat schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field, model_validator


class MessageCreate(BaseModel):
    """Text, attachment, or both"""
    message: Optional[str] = Field(default=None, max_length=5000)
    image_url: Optional[str] = Field(default=None, max_length=2048, pattern=r"^https?://")

    @model_validator(mode="after")
    def require_content(self):
        if self.message is not None:
            self.message = self.message.strip() or None
        if not self.message and not self.image_url:
            raise ValueError("Either a message or image is required")
        return self


class ChatMessageCreate(MessageCreate):
    user_id: Optional[UUID] = None  # Thread owner; required when an admin writes


class OrderMessageResponse(BaseModel):
    id: int
    order_id: UUID
    sender_id: UUID
    sender_role: str
    message: Optional[str]
    image_url: Optional[str]
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ChatMessageResponse(BaseModel):
    id: int
    user_id: UUID
    sender_id: UUID
    sender_role: str
    message: Optional[str]
    image_url: Optional[str]
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ChatThreadResponse(BaseModel):
    """Customer thread summary for the back office"""
    user_id: UUID
    full_name: Optional[str]
    email: str
    last_message_at: datetime
    unread_count: int


class MarkReadResponse(BaseModel):
    marked: int
    ids: List[int] = []


class UnreadCountResponse(BaseModel):
    unread: int


class AttachmentResponse(BaseModel):
    url: str
    media_type: str
