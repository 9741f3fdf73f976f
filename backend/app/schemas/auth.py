"""Request and response bodies for /api/auth."""

from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserResponse


# Fields are optional at the schema level so that a missing field produces
# the service's 400 message instead of a generic schema error.
class RegisterRequest(BaseModel):
    email: Optional[str] = Field(default=None, examples=["ada@example.com"])
    password: Optional[str] = Field(default=None, examples=["correct-horse"])
    username: Optional[str] = Field(default=None, examples=["ada_l"])


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserResponse
    token: str = Field(description="Bearer token valid for 7 days")
