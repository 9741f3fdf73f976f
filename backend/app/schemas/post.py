"""
SocialConnect Backend — Post & Comment Schemas
================================================

What:  API contracts for posts, comments and the like/comment counters.
How:   PostResponse is built from a Post row plus three computed values
       (likes_count, comments_count, is_liked) produced by the post
       service's count subqueries.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class PostCreateRequest(BaseModel):
    content: Optional[str] = Field(default=None, description="Post body, at most 1000 characters")
    image_url: Optional[str] = Field(default=None, description="Optional image link")


class PostResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    content: str
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False

    model_config = {"from_attributes": True}


class CommentCreateRequest(BaseModel):
    content: Optional[str] = Field(default=None, description="Comment body, at most 500 characters")


class CommentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    post_id: uuid.UUID
    content: str
    created_at: datetime
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}
