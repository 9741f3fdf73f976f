"""
SocialConnect Backend — User Service
======================================

What:  Profiles, profile edits and the follow graph.
Who:   Called by the /api/users route handlers.

Follow rules:
    - following yourself is rejected before touching the database (400);
      ck_follows_not_self backs this up in the table
    - the target must exist (404)
    - the edge is inserted with ON CONFLICT DO NOTHING against
      uq_follows_pair; no row returned → already following (409)
    - unfollow is a plain DELETE and therefore idempotent
"""

import logging
import uuid
from typing import AbstractSet, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import insert_or_ignore
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.follow import Follow
from app.models.notification import NotificationType
from app.models.user import User
from app.schemas.user import ProfileUpdateRequest, UserProfileResponse, UserResponse, UserSummary
from app.services.auth_service import USERNAME_RULE, validate_username
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

MAX_BIO_LENGTH = 500


class UserService:
    """Business logic for profiles and follows."""

    async def _follow_counts(self, db: AsyncSession, user_id: uuid.UUID) -> tuple[int, int]:
        followers = (
            select(func.count(Follow.id)).where(Follow.following_id == user_id).scalar_subquery()
        )
        following = (
            select(func.count(Follow.id)).where(Follow.follower_id == user_id).scalar_subquery()
        )
        result = await db.execute(select(followers, following))
        followers_count, following_count = result.one()
        return followers_count or 0, following_count or 0

    async def _get_user_or_404(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def get_profile(self, db: AsyncSession, user: User) -> UserProfileResponse:
        """The caller's own account with follow counts."""
        followers_count, following_count = await self._follow_counts(db, user.id)
        return UserProfileResponse(
            **UserResponse.model_validate(user).model_dump(),
            followers_count=followers_count,
            following_count=following_count,
        )

    async def get_user(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        viewer: Optional[User] = None,
    ) -> UserProfileResponse:
        """Public profile; is_following is false for anonymous viewers."""
        user = await self._get_user_or_404(db, user_id)
        followers_count, following_count = await self._follow_counts(db, user_id)

        is_following = False
        if viewer is not None:
            edge = await db.execute(
                select(Follow.id).where(
                    Follow.follower_id == viewer.id,
                    Follow.following_id == user_id,
                )
            )
            is_following = edge.first() is not None

        return UserProfileResponse(
            **UserResponse.model_validate(user).model_dump(),
            followers_count=followers_count,
            following_count=following_count,
            is_following=is_following,
        )

    async def update_profile(
        self,
        db: AsyncSession,
        user: User,
        changes: ProfileUpdateRequest,
        fields_set: AbstractSet[str],
    ) -> UserResponse:
        """
        Apply a partial profile update.

        Raises:
            ValidationError: username pattern, bio too long
            ConflictError: username belongs to someone else
        """
        username = changes.username
        if username:
            if not validate_username(username):
                raise ValidationError(USERNAME_RULE, field="username")

        if "bio" in fields_set and changes.bio and len(changes.bio) > MAX_BIO_LENGTH:
            raise ValidationError(
                f"Bio must be less than {MAX_BIO_LENGTH} characters", field="bio"
            )

        if username and username != user.username:
            taken = await db.execute(select(User.id).where(User.username == username))
            if taken.first() is not None:
                raise ConflictError("Username already taken")
            user.username = username

        if "bio" in fields_set:
            user.bio = changes.bio
        if "avatar_url" in fields_set:
            user.avatar_url = changes.avatar_url

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("Username already taken")

        logger.info("User %s updated profile fields %s", user.id, sorted(fields_set))
        return UserResponse.model_validate(user)

    # ── Follow graph ──────────────────────────────────────────────────────

    async def follow_user(
        self,
        db: AsyncSession,
        user: User,
        target_id: Optional[uuid.UUID],
    ) -> None:
        if target_id is None:
            raise ValidationError("User ID is required", field="user_id")
        if target_id == user.id:
            raise ValidationError("Cannot follow yourself", field="user_id")

        await self._get_user_or_404(db, target_id)

        follow_id = await insert_or_ignore(
            db,
            Follow,
            {"follower_id": user.id, "following_id": target_id},
            conflict_columns=("follower_id", "following_id"),
        )
        if follow_id is None:
            raise ConflictError("Already following this user")

        await notification_service.notify(db, target_id, NotificationType.FOLLOW, actor=user)

    async def unfollow_user(
        self,
        db: AsyncSession,
        user: User,
        target_id: Optional[uuid.UUID],
    ) -> None:
        if target_id is None:
            raise ValidationError("User ID is required", field="user_id")
        await db.execute(
            delete(Follow).where(
                Follow.follower_id == user.id,
                Follow.following_id == target_id,
            )
        )

    async def list_followers(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        offset: int = 0,
        limit: int = 10,
    ) -> List[UserSummary]:
        """Users who follow `user_id`, most recent first."""
        await self._get_user_or_404(db, user_id)
        result = await db.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return [UserSummary.model_validate(u) for u in result.scalars().all()]

    async def list_following(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        offset: int = 0,
        limit: int = 10,
    ) -> List[UserSummary]:
        """Users that `user_id` follows, most recent first."""
        await self._get_user_or_404(db, user_id)
        result = await db.execute(
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return [UserSummary.model_validate(u) for u in result.scalars().all()]


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
