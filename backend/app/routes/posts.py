"""
SocialConnect Backend — Post Route Handlers
=============================================

What:  Posts, feed, likes and comments under /api/posts.

Route Inventory:
    POST   /api/posts/create           create a post            (auth)
    GET    /api/posts/feed             followed users + self    (auth)
    GET    /api/posts/{id}             single post with stats   (optional auth)
    PUT    /api/posts/{id}             edit own post            (auth)
    DELETE /api/posts/{id}             delete own post          (auth)
    POST   /api/posts/{id}/like        like                     (auth)
    DELETE /api/posts/{id}/like        unlike                   (auth)
    POST   /api/posts/{id}/comment     comment                  (auth)
    GET    /api/posts/{id}/comments    list comments            (public)

Static paths (/create, /feed) are declared before /{post_id}.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import Pagination, get_current_user, get_current_user_optional, get_pagination
from app.models.user import User
from app.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from app.schemas.post import CommentCreateRequest, CommentResponse, PostCreateRequest, PostResponse
from app.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])

NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}


@router.post(
    "/create",
    status_code=201,
    response_model=ApiResponse[PostResponse],
    responses={400: {"description": "Invalid content", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    body: PostCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await post_service.create_post(db, user, body.content, body.image_url)
    return ApiResponse[PostResponse](data=post, message="Post created successfully")


@router.get(
    "/feed",
    response_model=ApiResponse[List[PostResponse]],
    summary="Home feed",
    description="Posts from followed users and the caller, newest first.",
)
async def get_feed(
    pagination: Pagination = Depends(get_pagination),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[PostResponse]]:
    posts = await post_service.get_feed(
        db, user, offset=pagination.offset, limit=pagination.limit
    )
    return ApiResponse[List[PostResponse]](data=posts, message="Feed retrieved successfully")


@router.get(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    responses=NOT_FOUND,
    summary="Get a post",
)
async def get_post(
    post_id: UUID,
    viewer: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await post_service.get_post(db, post_id, viewer_id=viewer.id if viewer else None)
    return ApiResponse[PostResponse](data=post, message="Post retrieved successfully")


@router.put(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        **NOT_FOUND,
    },
    summary="Edit a post",
)
async def update_post(
    post_id: UUID,
    body: PostCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await post_service.update_post(db, user, post_id, body.content, body.image_url)
    return ApiResponse[PostResponse](data=post, message="Post updated successfully")


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        **NOT_FOUND,
    },
    summary="Delete a post",
)
async def delete_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_post(db, user, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.post(
    "/{post_id}/like",
    response_model=MessageResponse,
    responses={
        409: {"description": "Already liked", "model": ErrorResponse},
        **NOT_FOUND,
    },
    summary="Like a post",
)
async def like_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.like_post(db, user, post_id)
    return MessageResponse(message="Post liked successfully")


@router.delete(
    "/{post_id}/like",
    response_model=MessageResponse,
    summary="Unlike a post",
)
async def unlike_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.unlike_post(db, user, post_id)
    return MessageResponse(message="Post unliked successfully")


@router.post(
    "/{post_id}/comment",
    status_code=201,
    response_model=ApiResponse[CommentResponse],
    responses={
        400: {"description": "Invalid content", "model": ErrorResponse},
        **NOT_FOUND,
    },
    summary="Comment on a post",
)
async def create_comment(
    post_id: UUID,
    body: CommentCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CommentResponse]:
    comment = await post_service.add_comment(db, user, post_id, body.content)
    return ApiResponse[CommentResponse](data=comment, message="Comment created successfully")


@router.get(
    "/{post_id}/comments",
    response_model=ApiResponse[List[CommentResponse]],
    responses=NOT_FOUND,
    summary="List comments on a post",
)
async def list_comments(
    post_id: UUID,
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CommentResponse]]:
    comments = await post_service.list_comments(
        db, post_id, offset=pagination.offset, limit=pagination.limit
    )
    return ApiResponse[List[CommentResponse]](
        data=comments, message="Comments retrieved successfully"
    )
