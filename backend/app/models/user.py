"""
SocialConnect Backend — User SQLAlchemy Model
===============================================

What:  ORM model representing the `users` table.
Who:   Used by the auth, user, post and notification services.

Table Design:
    - email, username: UNIQUE; the database is the final arbiter of
      uniqueness; the registration check is only for a friendlier message
    - password_hash: bcrypt hash; nullable for accounts imported without a
      password, which can never log in
    - bio, avatar_url: optional profile fields editable through PUT /profile
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import created_at_column, utcnow, uuid_pk


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = uuid_pk()

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # 3-20 characters, [A-Za-z0-9_]; validated by the auth service
    username: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = created_at_column()
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
