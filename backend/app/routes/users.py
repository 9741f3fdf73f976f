"""
SocialConnect Backend — User Route Handlers
=============================================

Route Inventory:
    GET    /api/users/profile               caller's profile + counts   (auth)
    PUT    /api/users/profile               edit profile                (auth)
    POST   /api/users/follow                follow {user_id}            (auth)
    DELETE /api/users/follow?user_id=       unfollow                    (auth)
    GET    /api/users/{id}                  public profile              (optional auth)
    GET    /api/users/{id}/followers        who follows the user
    GET    /api/users/{id}/following        whom the user follows
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import Pagination, get_current_user, get_current_user_optional, get_pagination
from app.models.user import User
from app.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from app.schemas.user import (
    FollowRequest,
    ProfileUpdateRequest,
    UserProfileResponse,
    UserResponse,
    UserSummary,
)
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/profile",
    response_model=ApiResponse[UserProfileResponse],
    summary="Get the caller's profile",
)
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserProfileResponse]:
    profile = await user_service.get_profile(db, user)
    return ApiResponse[UserProfileResponse](data=profile, message="Profile retrieved successfully")


@router.put(
    "/profile",
    response_model=ApiResponse[UserResponse],
    responses={
        400: {"description": "Invalid username or bio", "model": ErrorResponse},
        409: {"description": "Username taken", "model": ErrorResponse},
    },
    summary="Update the caller's profile",
)
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    updated = await user_service.update_profile(db, user, body, body.model_fields_set)
    return ApiResponse[UserResponse](data=updated, message="Profile updated successfully")


@router.post(
    "/follow",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing user id or self-follow", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Already following", "model": ErrorResponse},
    },
    summary="Follow a user",
)
async def follow_user(
    body: FollowRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.follow_user(db, user, body.user_id)
    return MessageResponse(message="User followed successfully")


@router.delete(
    "/follow",
    response_model=MessageResponse,
    summary="Unfollow a user",
)
async def unfollow_user(
    user_id: Optional[UUID] = Query(default=None, description="User to unfollow"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.unfollow_user(db, user, user_id)
    return MessageResponse(message="User unfollowed successfully")


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserProfileResponse],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user's public profile",
)
async def get_user(
    user_id: UUID,
    viewer: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserProfileResponse]:
    profile = await user_service.get_user(db, user_id, viewer=viewer)
    return ApiResponse[UserProfileResponse](
        data=profile, message="User profile retrieved successfully"
    )


@router.get(
    "/{user_id}/followers",
    response_model=ApiResponse[List[UserSummary]],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="List a user's followers",
)
async def list_followers(
    user_id: UUID,
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserSummary]]:
    users = await user_service.list_followers(
        db, user_id, offset=pagination.offset, limit=pagination.limit
    )
    return ApiResponse[List[UserSummary]](data=users, message="Followers retrieved successfully")


@router.get(
    "/{user_id}/following",
    response_model=ApiResponse[List[UserSummary]],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="List the users a user follows",
)
async def list_following(
    user_id: UUID,
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserSummary]]:
    users = await user_service.list_following(
        db, user_id, offset=pagination.offset, limit=pagination.limit
    )
    return ApiResponse[List[UserSummary]](data=users, message="Following retrieved successfully")
