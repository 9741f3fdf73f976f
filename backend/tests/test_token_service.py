"""
SocialConnect Backend — Token Service Unit Tests
==================================================

What we test:
    ✅ Issued tokens verify and carry id/email/username
    ✅ Expired, tampered and foreign-secret tokens are rejected
    ✅ Bearer header parsing
"""

from types import SimpleNamespace
from uuid import uuid4

from jose import jwt

from app.services.token_service import TokenService


def make_user():
    return SimpleNamespace(id=uuid4(), email="ada@example.com", username="ada_l")


class TestTokenRoundTrip:

    def setup_method(self):
        self.service = TokenService(secret="unit-test-secret", algorithm="HS256", expire_days=7)

    def test_claims_identify_the_user(self):
        user = make_user()
        claims = self.service.verify_token(self.service.generate_token(user))

        assert claims["id"] == str(user.id)
        assert claims["email"] == "ada@example.com"
        assert claims["username"] == "ada_l"

    def test_expiry_is_seven_days_after_issue(self):
        claims = self.service.verify_token(self.service.generate_token(make_user()))
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    def test_expired_token_is_rejected(self):
        token = jwt.encode(
            {"id": str(uuid4()), "iat": 1_000_000, "exp": 1_000_060},
            "unit-test-secret",
            algorithm="HS256",
        )
        assert self.service.verify_token(token) is None

    def test_token_signed_with_other_secret_is_rejected(self):
        other = TokenService(secret="someone-else", algorithm="HS256", expire_days=7)
        token = other.generate_token(make_user())
        assert self.service.verify_token(token) is None

    def test_garbage_is_rejected(self):
        assert self.service.verify_token("not.a.jwt") is None
        assert self.service.verify_token("") is None


class TestExtractTokenFromHeader:

    def test_bearer_header(self):
        assert TokenService.extract_token_from_header("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_missing_header(self):
        assert TokenService.extract_token_from_header(None) is None

    def test_other_scheme(self):
        assert TokenService.extract_token_from_header("Basic dXNlcjpwYXNz") is None
