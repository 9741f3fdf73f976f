"""
SocialConnect Backend — User Schemas
======================================

What:  Public representations of users at three levels of detail.
    - UserSummary:  author/actor badge embedded in posts, comments and
                    notifications ({id, username, avatar_url})
    - UserResponse: full account row minus the password hash
    - UserProfileResponse: UserResponse plus on-read follow counts
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    id: uuid.UUID
    username: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    username: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserProfileResponse(UserResponse):
    followers_count: int = Field(default=0)
    following_count: int = Field(default=0)
    is_following: Optional[bool] = Field(
        default=None,
        description="Whether the caller follows this user; null on the caller's own profile",
    )


class ProfileUpdateRequest(BaseModel):
    """
    Partial profile update. Only fields present in the request body are
    applied; sending `"bio": null` clears the bio.
    """
    username: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class FollowRequest(BaseModel):
    user_id: Optional[uuid.UUID] = None
