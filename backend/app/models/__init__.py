"""
SocialConnect Backend — ORM Models
====================================

Importing this package registers every table with `Base.metadata`, which
Alembic autogenerate and the test suite's create_all both depend on.
"""

from app.models.user import User
from app.models.post import Post
from app.models.comment import Comment
from app.models.like import Like
from app.models.follow import Follow
from app.models.notification import Notification, NotificationType

__all__ = [
    "User",
    "Post",
    "Comment",
    "Like",
    "Follow",
    "Notification",
    "NotificationType",
]
