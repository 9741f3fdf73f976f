"""
SocialConnect Backend — Auth Route Handlers
=============================================

What:  POST /api/auth/register, /login and /logout.
How:   Parse the JSON body, delegate to AuthService, wrap the result in the
       response envelope. Errors are raised as exceptions and rendered by
       the global handlers.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[AuthResponse],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        409: {"description": "Email or username taken", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthResponse]:
    result = await auth_service.register(
        db,
        email=body.email,
        password=body.password,
        username=body.username,
    )
    return ApiResponse[AuthResponse](data=result, message="User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange email and password for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthResponse]:
    result = await auth_service.login(db, email=body.email, password=body.password)
    return ApiResponse[AuthResponse](data=result, message="Login successful")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Tokens are stateless; the client discards its token.",
)
async def logout() -> MessageResponse:
    return MessageResponse(message="Logout successful")
