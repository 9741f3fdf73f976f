"""
SocialConnect Backend — Notification Service
==============================================

What:  Creates activity notifications and serves the recipient's inbox.
Who:   PostService and UserService call notify() as a side effect of likes,
       comments and follows; the /api/notifications routes call the rest.

Change feed:
    notify() and the mark-read operations commit before publishing to the
    realtime hub, so a subscriber never sees a row that is later rolled
    back.

Operations:
    - notify():             INSERT + publish INSERT event
    - list_notifications(): paginated inbox with related user/post, unread
                            and total counts
    - unread_count()
    - mark_as_read():       idempotent; publishes UPDATE only on change
    - mark_all_as_read():   returns number of rows flipped
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.notification import Notification, NotificationType
from app.models.post import Post
from app.models.user import User
from app.schemas.notification import NotificationListResponse, NotificationResponse
from app.services.realtime import INSERT, UPDATE, notification_hub

logger = logging.getLogger(__name__)

NOTIFICATION_TEMPLATES = {
    NotificationType.LIKE: "{username} liked your post",
    NotificationType.COMMENT: "{username} commented on your post",
    NotificationType.FOLLOW: "{username} started following you",
}


class NotificationService:
    """Business logic for the notifications inbox and its change feed."""

    async def notify(
        self,
        db: AsyncSession,
        recipient_id: uuid.UUID,
        notification_type: NotificationType,
        actor: User,
        post: Optional[Post] = None,
    ) -> Notification:
        """
        Record that `actor` did something the recipient should hear about.

        Commits the current transaction (the triggering like/comment/follow
        goes with it) and then publishes the new row to the recipient's
        realtime subscribers.
        """
        notification = Notification(
            user_id=recipient_id,
            type=notification_type.value,
            content=NOTIFICATION_TEMPLATES[notification_type].format(username=actor.username),
            related_user=actor,
            related_post=post,
        )
        db.add(notification)
        await db.commit()

        logger.info(
            "Notification %s (%s) created for user %s",
            notification.id,
            notification.type,
            recipient_id,
        )
        self._publish(notification, INSERT)
        return notification

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        offset: int = 0,
        limit: int = 10,
        unread_only: bool = False,
    ) -> NotificationListResponse:
        filters = [Notification.user_id == user_id]
        if unread_only:
            filters.append(Notification.is_read.is_(False))

        result = await db.execute(
            select(Notification)
            .where(*filters)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
        )
        notifications = list(result.scalars().all())

        total_count = await db.scalar(
            select(func.count(Notification.id)).where(*filters)
        )

        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=await self.unread_count(db, user_id),
            total_count=total_count or 0,
        )

    async def unread_count(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        count = await db.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return count or 0

    async def mark_as_read(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        notification_id: uuid.UUID,
    ) -> NotificationResponse:
        """
        Mark one of the caller's notifications as read.

        Raises:
            NotFoundError: no such notification, or it belongs to another user.
                           The two cases are indistinguishable to the caller.
        """
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError(resource="notification", resource_id=str(notification_id))

        if not notification.is_read:
            notification.is_read = True
            await db.commit()
            self._publish(notification, UPDATE)

        return NotificationResponse.model_validate(notification)

    async def mark_all_as_read(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        """Flip every unread notification of the user; returns how many changed."""
        result = await db.execute(
            select(Notification).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        unread: List[Notification] = list(result.scalars().all())
        if not unread:
            return 0

        for notification in unread:
            notification.is_read = True
        await db.commit()

        for notification in unread:
            self._publish(notification, UPDATE)

        logger.info("Marked %d notifications read for user %s", len(unread), user_id)
        return len(unread)

    def _publish(self, notification: Notification, event: str) -> None:
        payload = NotificationResponse.model_validate(notification).model_dump(mode="json")
        notification_hub.publish(notification.user_id, event, payload)


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()
