"""
SocialConnect Backend — Bearer Token Service
==============================================

What:  Signs and verifies the compact JWT that identifies a caller.
How:   python-jose HS256 tokens carrying {id, email, username} plus iat/exp.
Who:   AuthService issues tokens; the auth dependencies and the realtime
       WebSocket verify them.

Token lifecycle:
    register/login → generate_token(user) → client stores token
    each request   → "Authorization: Bearer <token>" (parsed by HTTPBearer)
                   → verify_token → claims["id"]
    WebSocket      → ?token=<token>, or the handshake's Authorization header
                     via extract_token_from_header

Tokens are stateless: logout is a client-side discard, and a token stays
valid until `exp` (7 days by default).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.config import settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class TokenService:
    """Stateless JWT signer/verifier bound to the configured secret."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_days: Optional[int] = None,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expire_days = expire_days or settings.jwt_expire_days

    def generate_token(self, user: Any) -> str:
        """
        Issue a token for a user row (or anything with id/email/username).

        The id is serialized as a string so the claim round-trips through
        JSON unchanged.
        """
        now = datetime.now(timezone.utc)
        claims = {
            "id": str(user.id),
            "email": user.email,
            "username": user.username,
            "iat": now,
            "exp": now + timedelta(days=self.expire_days),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Decode and validate a token.

        Returns:
            The claims dict, or None when the signature is wrong, the token
            is malformed, or it has expired.
        """
        if not token:
            return None
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Rejected bearer token: %s", e)
            return None

    @staticmethod
    def extract_token_from_header(auth_header: Optional[str]) -> Optional[str]:
        """Return the token part of an `Authorization: Bearer <token>` header."""
        if not auth_header or not auth_header.startswith(BEARER_PREFIX):
            return None
        token = auth_header[len(BEARER_PREFIX):].strip()
        return token or None


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService()
