"""
SocialConnect Backend — Post SQLAlchemy Model
===============================================

What:  ORM model representing the `posts` table.

Constraints:
    - user_id → users.id ON DELETE CASCADE
    - length(content) <= 1000 (CHECK), mirrored by service validation
    - likes and comments reference posts with ON DELETE CASCADE, so deleting
      a post is a single statement

Query Patterns:
    - Feed: WHERE user_id IN (:followed + :self) ORDER BY created_at DESC
      → idx_posts_user_created
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.mixins import created_at_column, utcnow, uuid_pk
from app.models.user import User

MAX_POST_LENGTH = 1000


class Post(Base):
    """A piece of user-authored content shown in feeds."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = uuid_pk()

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = created_at_column()
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # Always needed for the author summary; joined so async code never
    # triggers a lazy load.
    user: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint(f"length(content) <= {MAX_POST_LENGTH}", name="ck_posts_content_length"),
        Index("idx_posts_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id})>"
