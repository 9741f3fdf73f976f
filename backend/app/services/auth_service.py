"""
SocialConnect Backend — Auth Service
======================================

What:  Registration and login: credential validation, bcrypt hashing and
       token issuance.
Who:   Called by the /api/auth route handlers.

Register flow:
    validate email / username / password
    → reject if email or username is taken (409)
    → bcrypt hash (worker thread) → INSERT users → issue token

Login flow:
    validate presence / email format
    → SELECT user by email → bcrypt compare → issue token
    Unknown email, password-less account and wrong password all produce the
    same 401 so callers cannot discover which emails are registered.
"""

import logging
import re
from typing import Optional

import bcrypt
from starlette.concurrency import run_in_threadpool
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import AuthenticationError, ConflictError, ValidationError
from app.models.user import User
from app.schemas.auth import AuthResponse
from app.schemas.user import UserResponse
from app.services.token_service import token_service

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes; newer releases reject longer input
MAX_PASSWORD_BYTES = 72

USERNAME_RULE = "Username must be 3-20 characters, alphanumeric and underscores only"


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def validate_username(username: str) -> bool:
    return bool(USERNAME_PATTERN.match(username))


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Stored password hash could not be parsed")
        return False


class AuthService:
    """Business logic for /api/auth."""

    async def register(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
        username: Optional[str],
    ) -> AuthResponse:
        """
        Create an account and return it with a fresh token.

        Raises:
            ValidationError: missing field, bad email, bad username, short password
            ConflictError: email or username already registered
        """
        if not email or not password or not username:
            raise ValidationError("Email, password, and username are required")

        if not validate_email(email):
            raise ValidationError("Invalid email format", field="email")

        if not validate_username(username):
            raise ValidationError(USERNAME_RULE, field="username")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
            )

        existing = await db.execute(
            select(User.id).where(or_(User.email == email, User.username == username))
        )
        if existing.first() is not None:
            raise ConflictError("User with this email or username already exists")

        # bcrypt is CPU-bound; keep it off the event loop
        password_hash = await run_in_threadpool(hash_password, password)
        user = User(email=email, username=username, password_hash=password_hash)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same identity
            raise ConflictError("User with this email or username already exists")

        logger.info("Registered user %s (%s)", user.id, user.username)

        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=token_service.generate_token(user),
        )

    async def login(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResponse:
        """
        Exchange email + password for a token.

        Raises:
            ValidationError: missing field or bad email format
            AuthenticationError: credentials do not match
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        if not validate_email(email):
            raise ValidationError("Invalid email format", field="email")

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None or not user.password_hash:
            raise AuthenticationError("Invalid credentials")

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("Failed login for user %s", user.id)
            raise AuthenticationError("Invalid credentials")

        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=token_service.generate_token(user),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
