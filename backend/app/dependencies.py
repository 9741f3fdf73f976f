"""
SocialConnect Backend — FastAPI Dependencies
==============================================

What:  Request-scoped building blocks shared by the route modules.
    - get_current_user:           bearer token → User row, or 401
    - get_current_user_optional:  same resolution, None instead of 401
    - Pagination:                 validated page/limit query parameters

Token resolution (both variants):
    Authorization header → "Bearer <token>" → verify signature + expiry
    → claims["id"] → SELECT users WHERE id = :id
    A failure at any step means "unauthenticated".
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.models.user import User
from app.services.token_service import token_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches our code, which answers with the
# envelope-shaped 401 instead of FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def resolve_user(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    """Return the user a token belongs to, or None."""
    if not token:
        return None

    claims = token_service.verify_token(token)
    if not claims:
        return None

    try:
        user_id = uuid.UUID(str(claims.get("id")))
    except ValueError:
        logger.debug("Token carried a malformed user id")
        return None

    return await db.get(User, user_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Require an authenticated caller.

    Raises:
        AuthenticationError: no token, bad token, or the user no longer exists
    """
    token = credentials.credentials if credentials else None
    user = await resolve_user(db, token)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """Resolve the caller if a valid token was sent; anonymous otherwise."""
    token = credentials.credentials if credentials else None
    return await resolve_user(db, token)


@dataclass
class Pagination:
    """page/limit query parameters; page is 1-based."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(default=10, ge=1, le=100, description="Items per page (max 100)"),
) -> Pagination:
    return Pagination(page=page, limit=limit)
