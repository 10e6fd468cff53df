"""Notification schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: UUID
    user_id: UUID
    order_id: Optional[UUID]
    title: str
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
