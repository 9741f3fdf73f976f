"""
SocialConnect Backend — User Endpoint Tests
=============================================

What we test:
    ✅ Own profile with follow counts
    ✅ Partial profile updates and username rules
    ✅ Follow: self → 400, missing user → 404, twice → 409
    ✅ Unfollow is idempotent
    ✅ Public profile is_following per viewer
    ✅ Follower / following lists
"""

import uuid

import pytest

from helpers import assert_error, data_of


async def follow(client, follower, target):
    return await client.post(
        "/api/users/follow", json={"user_id": target["id"]}, headers=follower["headers"]
    )


@pytest.mark.asyncio
async def test_own_profile(test_client, alice):
    profile = data_of(await test_client.get("/api/users/profile", headers=alice["headers"]))

    assert profile["id"] == alice["id"]
    assert profile["email"] == "alice@example.com"
    assert profile["followers_count"] == 0
    assert profile["following_count"] == 0


@pytest.mark.asyncio
async def test_update_profile(test_client, alice):
    updated = data_of(
        await test_client.put(
            "/api/users/profile",
            json={"bio": "Mathematician", "avatar_url": "https://img.example/a.png"},
            headers=alice["headers"],
        )
    )
    assert updated["bio"] == "Mathematician"
    assert updated["username"] == "alice"

    # Omitted fields are left alone; explicit null clears
    updated = data_of(
        await test_client.put(
            "/api/users/profile", json={"username": "alice_l"}, headers=alice["headers"]
        )
    )
    assert updated["username"] == "alice_l"
    assert updated["bio"] == "Mathematician"

    updated = data_of(
        await test_client.put("/api/users/profile", json={"bio": None}, headers=alice["headers"])
    )
    assert updated["bio"] is None
    assert updated["avatar_url"] == "https://img.example/a.png"


@pytest.mark.asyncio
async def test_update_profile_rules(test_client, alice, bob):
    response = await test_client.put(
        "/api/users/profile", json={"username": "bob"}, headers=alice["headers"]
    )
    assert_error(response, 409, "Username already taken")

    response = await test_client.put(
        "/api/users/profile", json={"username": "no spaces"}, headers=alice["headers"]
    )
    assert_error(response, 400)

    response = await test_client.put(
        "/api/users/profile", json={"bio": "x" * 501}, headers=alice["headers"]
    )
    assert_error(response, 400, "Bio must be less than 500 characters")


@pytest.mark.asyncio
async def test_follow_and_counts(test_client, alice, bob):
    response = await follow(test_client, alice, bob)
    assert response.status_code == 200
    assert response.json()["message"] == "User followed successfully"

    mine = data_of(await test_client.get("/api/users/profile", headers=alice["headers"]))
    assert mine["following_count"] == 1

    theirs = data_of(await test_client.get(f"/api/users/{bob['id']}", headers=alice["headers"]))
    assert theirs["followers_count"] == 1
    assert theirs["is_following"] is True

    anonymous = data_of(await test_client.get(f"/api/users/{bob['id']}"))
    assert anonymous["is_following"] is False
    assert "email" in anonymous


@pytest.mark.asyncio
async def test_cannot_follow_self(test_client, alice):
    response = await follow(test_client, alice, alice)
    assert_error(response, 400, "Cannot follow yourself")


@pytest.mark.asyncio
async def test_follow_twice_conflicts(test_client, alice, bob):
    assert (await follow(test_client, alice, bob)).status_code == 200
    response = await follow(test_client, alice, bob)
    assert_error(response, 409, "Already following this user")


@pytest.mark.asyncio
async def test_follow_requires_existing_user(test_client, alice):
    response = await follow(test_client, alice, {"id": str(uuid.uuid4())})
    assert_error(response, 404, "User not found")

    response = await test_client.post("/api/users/follow", json={}, headers=alice["headers"])
    assert_error(response, 400, "User ID is required")


@pytest.mark.asyncio
async def test_unfollow_is_idempotent(test_client, alice, bob):
    await follow(test_client, alice, bob)

    for _ in range(2):
        response = await test_client.delete(
            f"/api/users/follow?user_id={bob['id']}", headers=alice["headers"]
        )
        assert response.status_code == 200
        assert response.json()["message"] == "User unfollowed successfully"

    theirs = data_of(await test_client.get(f"/api/users/{bob['id']}", headers=alice["headers"]))
    assert theirs["followers_count"] == 0
    assert theirs["is_following"] is False

    response = await test_client.delete("/api/users/follow", headers=alice["headers"])
    assert_error(response, 400, "User ID is required")


@pytest.mark.asyncio
async def test_unknown_user(test_client, db_tables):
    response = await test_client.get(f"/api/users/{uuid.uuid4()}")
    assert_error(response, 404, "User not found")


@pytest.mark.asyncio
async def test_followers_and_following_lists(test_client, register_user, alice, bob):
    carol = await register_user("carol")
    await follow(test_client, alice, carol)
    await follow(test_client, bob, carol)

    followers = data_of(await test_client.get(f"/api/users/{carol['id']}/followers"))
    assert {u["username"] for u in followers} == {"alice", "bob"}

    following = data_of(await test_client.get(f"/api/users/{alice['id']}/following"))
    assert [u["username"] for u in following] == ["carol"]
