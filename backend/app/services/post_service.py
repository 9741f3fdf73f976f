"""
SocialConnect Backend — Post Service
======================================

What:  Posts, the home feed, likes and comments.
Who:   Called by the /api/posts route handlers.

Every post returned to a client carries three values computed on read:
    likes_count     correlated COUNT over likes
    comments_count  correlated COUNT over comments
    is_liked        EXISTS(like by the viewer); always false for anonymous viewers
They are selected alongside the post row in one statement (see
_post_with_stats) rather than one query per post.

Ownership:
    update/delete compare post.user_id with the caller and raise
    PermissionDeniedError (403) on mismatch. Existence is checked first, so
    a missing post is 404 for everyone.

Likes:
    like_post() is a single INSERT ... ON CONFLICT DO NOTHING against
    uq_likes_user_post. No row returned → the caller already liked it (409).
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import Select, delete, exists, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import insert_or_ignore
from app.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.comment import MAX_COMMENT_LENGTH, Comment
from app.models.follow import Follow
from app.models.like import Like
from app.models.notification import NotificationType
from app.models.post import MAX_POST_LENGTH, Post
from app.models.user import User
from app.schemas.post import CommentResponse, PostResponse
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def validate_post_content(content: Optional[str]) -> str:
    """Returns the trimmed content or raises ValidationError."""
    if not content or not content.strip():
        raise ValidationError("Post content is required", field="content")
    if len(content) > MAX_POST_LENGTH:
        raise ValidationError(
            f"Post content must be less than {MAX_POST_LENGTH} characters", field="content"
        )
    return content.strip()


def validate_comment_content(content: Optional[str]) -> str:
    if not content or not content.strip():
        raise ValidationError("Comment content is required", field="content")
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"Comment must be less than {MAX_COMMENT_LENGTH} characters", field="content"
        )
    return content.strip()


def _post_with_stats(viewer_id: Optional[uuid.UUID]) -> Select:
    likes_count = (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    comments_count = (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    if viewer_id is None:
        is_liked = literal(False)
    else:
        is_liked = exists().where(Like.post_id == Post.id, Like.user_id == viewer_id)

    return select(
        Post,
        likes_count.label("likes_count"),
        comments_count.label("comments_count"),
        is_liked.label("is_liked"),
    )


def _to_response(post: Post, likes_count: int = 0, comments_count: int = 0, is_liked: bool = False) -> PostResponse:
    return PostResponse.model_validate(post).model_copy(
        update={
            "likes_count": likes_count or 0,
            "comments_count": comments_count or 0,
            "is_liked": bool(is_liked),
        }
    )


class PostService:
    """Business logic for posts, likes and comments."""

    async def _get_post_or_404(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create_post(
        self,
        db: AsyncSession,
        user: User,
        content: Optional[str],
        image_url: Optional[str] = None,
    ) -> PostResponse:
        post = Post(
            user=user,
            content=validate_post_content(content),
            image_url=image_url or None,
        )
        db.add(post)
        await db.flush()
        logger.info("User %s created post %s", user.id, post.id)
        return _to_response(post)

    async def get_post(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> PostResponse:
        result = await db.execute(_post_with_stats(viewer_id).where(Post.id == post_id))
        row = result.first()
        if row is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return _to_response(*row)

    async def get_feed(
        self,
        db: AsyncSession,
        user: User,
        offset: int = 0,
        limit: int = 10,
    ) -> List[PostResponse]:
        """Posts by everyone the user follows, plus the user's own, newest first."""
        followed = select(Follow.following_id).where(Follow.follower_id == user.id)
        result = await db.execute(
            _post_with_stats(user.id)
            .where(or_(Post.user_id.in_(followed), Post.user_id == user.id))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [_to_response(*row) for row in result.all()]

    async def update_post(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        content: Optional[str],
        image_url: Optional[str] = None,
    ) -> PostResponse:
        content = validate_post_content(content)
        post = await self._get_post_or_404(db, post_id)
        if post.user_id != user.id:
            raise PermissionDeniedError("Unauthorized to update this post")

        post.content = content
        post.image_url = image_url or None
        await db.flush()
        return await self.get_post(db, post_id, viewer_id=user.id)

    async def delete_post(self, db: AsyncSession, user: User, post_id: uuid.UUID) -> None:
        """Delete a post; its likes and comments go with it via ON DELETE CASCADE."""
        post = await self._get_post_or_404(db, post_id)
        if post.user_id != user.id:
            raise PermissionDeniedError("Unauthorized to delete this post")

        await db.execute(delete(Post).where(Post.id == post_id))
        logger.info("User %s deleted post %s", user.id, post_id)

    # ── Likes ─────────────────────────────────────────────────────────────

    async def like_post(self, db: AsyncSession, user: User, post_id: uuid.UUID) -> None:
        """
        Raises:
            NotFoundError: post does not exist
            ConflictError: the user already likes this post
        """
        post = await self._get_post_or_404(db, post_id)

        like_id = await insert_or_ignore(
            db,
            Like,
            {"user_id": user.id, "post_id": post_id},
            conflict_columns=("user_id", "post_id"),
        )
        if like_id is None:
            raise ConflictError("Post already liked")

        if post.user_id != user.id:
            await notification_service.notify(
                db, post.user_id, NotificationType.LIKE, actor=user, post=post
            )

    async def unlike_post(self, db: AsyncSession, user: User, post_id: uuid.UUID) -> None:
        """Remove the user's like. Unliking a post that isn't liked is a no-op."""
        await db.execute(
            delete(Like).where(Like.user_id == user.id, Like.post_id == post_id)
        )

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        content: Optional[str],
    ) -> CommentResponse:
        content = validate_comment_content(content)
        post = await self._get_post_or_404(db, post_id)

        comment = Comment(user=user, post_id=post.id, content=content)
        db.add(comment)
        await db.flush()
        response = CommentResponse.model_validate(comment)

        if post.user_id != user.id:
            await notification_service.notify(
                db, post.user_id, NotificationType.COMMENT, actor=user, post=post
            )
        return response

    async def list_comments(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        offset: int = 0,
        limit: int = 10,
    ) -> List[CommentResponse]:
        await self._get_post_or_404(db, post_id)
        result = await db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [CommentResponse.model_validate(c) for c in result.scalars().all()]


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
