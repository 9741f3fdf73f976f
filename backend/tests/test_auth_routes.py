"""
SocialConnect Backend — Auth & Health Endpoint Tests
======================================================

End-to-end over HTTPX against the ASGI app and a SQLite database.
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.services.token_service import token_service
from helpers import assert_error


@pytest.mark.asyncio
async def test_register_returns_user_and_token(test_client):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "ada@example.com", "password": "secret123", "username": "ada_l"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["data"]["user"]["username"] == "ada_l"
    assert "password_hash" not in body["data"]["user"]
    assert body["data"]["token"]


@pytest.mark.asyncio
async def test_register_duplicate_username_conflicts(test_client, alice):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "other@example.com", "password": "secret123", "username": "alice"},
    )
    assert_error(response, 409, "User with this email or username already exists")


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(test_client, alice):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": alice["email"], "password": "secret123", "username": "alice2"},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_validation(test_client):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "ada@example.com", "password": "123", "username": "ada"},
    )
    assert_error(response, 400, "Password must be at least 6 characters")

    response = await test_client.post("/api/auth/register", json={"email": "ada@example.com"})
    assert_error(response, 400, "Email, password, and username are required")


@pytest.mark.asyncio
async def test_register_rejects_password_longer_than_bcrypt_accepts(test_client):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "ada@example.com", "password": "p" * 80, "username": "ada"},
    )
    assert_error(response, 400, "Password must be at most 72 bytes")
    assert response.json()["details"]["field"] == "password"


@pytest.mark.asyncio
async def test_login(test_client, alice):
    response = await test_client.post(
        "/api/auth/login", json={"email": alice["email"], "password": "secret123"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["id"] == alice["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(test_client, alice):
    response = await test_client.post(
        "/api/auth/login", json={"email": alice["email"], "password": "nope-nope"}
    )
    assert_error(response, 401, "Invalid credentials")


@pytest.mark.asyncio
async def test_login_unknown_email(test_client):
    response = await test_client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
    )
    assert_error(response, 401, "Invalid credentials")


@pytest.mark.asyncio
async def test_logout(test_client, alice):
    response = await test_client.post("/api/auth/logout", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Logout successful"}


@pytest.mark.asyncio
async def test_protected_route_without_token(test_client):
    response = await test_client.get("/api/users/profile")
    assert_error(response, 401, "Unauthorized")
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_protected_route_with_bad_token(test_client):
    response = await test_client.get(
        "/api/users/profile", headers={"Authorization": "Bearer not.a.token"}
    )
    assert_error(response, 401, "Unauthorized")


@pytest.mark.asyncio
async def test_valid_token_for_deleted_user_is_rejected(test_client):
    ghost = SimpleNamespace(id=uuid4(), email="ghost@example.com", username="ghost")
    token = token_service.generate_token(ghost)

    response = await test_client.get(
        "/api/users/profile", headers={"Authorization": f"Bearer {token}"}
    )

    assert_error(response, 401, "Unauthorized")
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_health_and_smoke(test_client):
    health = await test_client.get("/health")
    assert health.status_code == 200
    assert health.json()["database"] == "connected"

    smoke = await test_client.get("/api/test")
    assert smoke.status_code == 200
    assert smoke.json()["message"] == "SocialConnect API is running!"


@pytest.mark.asyncio
async def test_responses_carry_request_id(test_client):
    response = await test_client.get("/api/test", headers={"X-Request-ID": "abc12345"})
    assert response.headers["X-Request-ID"] == "abc12345"
