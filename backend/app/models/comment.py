"""ORM model for the `comments` table."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.mixins import created_at_column, uuid_pk
from app.models.user import User

MAX_COMMENT_LENGTH = 500


class Comment(Base):
    """A reply left by a user on a post."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = uuid_pk()

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = created_at_column()

    user: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint(
            f"length(content) <= {MAX_COMMENT_LENGTH}", name="ck_comments_content_length"
        ),
        Index("idx_comments_post_created", "post_id", "created_at"),
    )
