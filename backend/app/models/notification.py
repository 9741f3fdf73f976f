"""
SocialConnect Backend — Notification SQLAlchemy Model
=======================================================

What:  ORM model representing the `notifications` table.
When:  Rows are created as a side effect of like, comment and follow
       actions, and flipped to is_read=True by the recipient.

Foreign keys:
    - user_id (recipient) → users.id ON DELETE CASCADE
    - related_user_id (actor) → users.id ON DELETE SET NULL
    - related_post_id → posts.id ON DELETE SET NULL, so a notification
      outlives the post it mentioned
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.mixins import created_at_column, uuid_pk
from app.models.post import Post
from app.models.user import User


class NotificationType(str, enum.Enum):
    FOLLOW = "follow"
    LIKE = "like"
    COMMENT = "comment"


class Notification(Base):
    """An activity notice delivered to one user."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = uuid_pk()

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    related_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    related_post_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("posts.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = created_at_column()

    related_user: Mapped[Optional[User]] = relationship(
        foreign_keys=[related_user_id],
        lazy="joined",
    )
    related_post: Mapped[Optional[Post]] = relationship(
        foreign_keys=[related_post_id],
        lazy="joined",
    )

    __table_args__ = (
        CheckConstraint(
            "type IN ('follow', 'like', 'comment')", name="ck_notifications_type"
        ),
        Index("idx_notifications_user_read", "user_id", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type='{self.type}', is_read={self.is_read})>"
