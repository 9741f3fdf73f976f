"""Schemas for notifications and the realtime change feed."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class RelatedPost(BaseModel):
    id: uuid.UUID
    content: str

    model_config = {"from_attributes": True}


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str = Field(description="follow, like or comment")
    content: str
    is_read: bool
    created_at: datetime
    related_user_id: Optional[uuid.UUID] = None
    related_post_id: Optional[uuid.UUID] = None
    related_user: Optional[UserSummary] = None
    related_post: Optional[RelatedPost] = None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    total_count: int = Field(description="Notifications matching the filter, across all pages")


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int


class RealtimeInfo(BaseModel):
    user_id: uuid.UUID
    connection_type: str = "websocket"
    endpoint: str
    instructions: str

