"""
SocialConnect Backend — Notification Endpoint Tests
=====================================================

What we test:
    ✅ Like, comment and follow each notify the target; acting on your own
       post does not
    ✅ Inbox ordering, unread filter, counts
    ✅ Mark one read (idempotent, owner only) and mark all read
    ✅ Related post becomes null when the post is deleted
"""

import uuid

import pytest

from helpers import assert_error, data_of


async def alice_post_liked_by_bob(client, alice, bob):
    post = data_of(
        await client.post(
            "/api/posts/create", json={"content": "hello"}, headers=alice["headers"]
        ),
        201,
    )
    await client.post(f"/api/posts/{post['id']}/like", headers=bob["headers"])
    return post


async def inbox(client, user, query=""):
    return data_of(await client.get(f"/api/notifications{query}", headers=user["headers"]))


@pytest.mark.asyncio
async def test_activity_creates_notifications(test_client, alice, bob):
    post = await alice_post_liked_by_bob(test_client, alice, bob)
    await test_client.post(
        f"/api/posts/{post['id']}/comment", json={"content": "nice"}, headers=bob["headers"]
    )
    await test_client.post(
        "/api/users/follow", json={"user_id": alice["id"]}, headers=bob["headers"]
    )

    data = await inbox(test_client, alice)
    notifications = data["notifications"]

    assert [n["type"] for n in notifications] == ["follow", "comment", "like"]
    assert notifications[0]["content"] == "bob started following you"
    assert notifications[1]["content"] == "bob commented on your post"
    assert notifications[2]["content"] == "bob liked your post"
    assert notifications[2]["related_user"]["username"] == "bob"
    assert notifications[2]["related_post"]["id"] == post["id"]
    assert notifications[0]["related_post"] is None
    assert data["unread_count"] == 3
    assert data["total_count"] == 3

    assert (await inbox(test_client, bob))["notifications"] == []


@pytest.mark.asyncio
async def test_own_activity_does_not_notify(test_client, alice):
    post = data_of(
        await test_client.post(
            "/api/posts/create", json={"content": "mine"}, headers=alice["headers"]
        ),
        201,
    )
    await test_client.post(f"/api/posts/{post['id']}/like", headers=alice["headers"])
    await test_client.post(
        f"/api/posts/{post['id']}/comment", json={"content": "me"}, headers=alice["headers"]
    )

    assert (await inbox(test_client, alice))["total_count"] == 0


@pytest.mark.asyncio
async def test_mark_one_read_is_idempotent(test_client, alice, bob):
    await alice_post_liked_by_bob(test_client, alice, bob)
    notification = (await inbox(test_client, alice))["notifications"][0]
    url = f"/api/notifications/{notification['id']}"

    for _ in range(2):
        marked = data_of(await test_client.put(url, headers=alice["headers"]))
        assert marked["is_read"] is True

    count = data_of(await test_client.get("/api/notifications/unread-count", headers=alice["headers"]))
    assert count == {"unread_count": 0}


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(test_client, alice, bob):
    await alice_post_liked_by_bob(test_client, alice, bob)
    notification = (await inbox(test_client, alice))["notifications"][0]

    response = await test_client.put(
        f"/api/notifications/{notification['id']}", headers=bob["headers"]
    )
    assert_error(response, 404, "Notification not found")

    response = await test_client.put(
        f"/api/notifications/{uuid.uuid4()}", headers=alice["headers"]
    )
    assert_error(response, 404, "Notification not found")


@pytest.mark.asyncio
async def test_unread_filter_and_mark_all(test_client, register_user, alice, bob):
    carol = await register_user("carol")
    for follower in (bob, carol):
        await test_client.post(
            "/api/users/follow", json={"user_id": alice["id"]}, headers=follower["headers"]
        )

    first = (await inbox(test_client, alice))["notifications"][0]
    await test_client.put(f"/api/notifications/{first['id']}", headers=alice["headers"])

    unread = await inbox(test_client, alice, "?unread=true")
    assert len(unread["notifications"]) == 1
    assert unread["total_count"] == 1
    assert unread["unread_count"] == 1

    result = data_of(await test_client.patch("/api/notifications", headers=alice["headers"]))
    assert result == {"updated": 1}

    result = data_of(await test_client.patch("/api/notifications", headers=alice["headers"]))
    assert result == {"updated": 0}

    everything = await inbox(test_client, alice)
    assert everything["unread_count"] == 0
    assert all(n["is_read"] for n in everything["notifications"])


@pytest.mark.asyncio
async def test_inbox_pagination(test_client, register_user, alice):
    for i in range(3):
        follower = await register_user(f"fan_{i}")
        await test_client.post(
            "/api/users/follow", json={"user_id": alice["id"]}, headers=follower["headers"]
        )

    page = await inbox(test_client, alice, "?page=2&limit=2")
    assert len(page["notifications"]) == 1
    assert page["notifications"][0]["related_user"]["username"] == "fan_0"
    assert page["total_count"] == 3


@pytest.mark.asyncio
async def test_deleted_post_leaves_notification(test_client, alice, bob):
    post = await alice_post_liked_by_bob(test_client, alice, bob)
    await test_client.delete(f"/api/posts/{post['id']}", headers=alice["headers"])

    notification = (await inbox(test_client, alice))["notifications"][0]
    assert notification["related_post_id"] is None
    assert notification["related_post"] is None
    assert notification["related_user"]["username"] == "bob"


@pytest.mark.asyncio
async def test_realtime_info(test_client, alice):
    info = data_of(await test_client.get("/api/notifications/realtime", headers=alice["headers"]))
    assert info["user_id"] == alice["id"]
    assert info["connection_type"] == "websocket"
    assert info["endpoint"] == "/api/notifications/ws"
