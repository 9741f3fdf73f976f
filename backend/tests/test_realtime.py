"""
SocialConnect Backend — Realtime Change Feed Tests
====================================================

What we test:
    ✅ Hub fan-out to every subscription of one user, and only that user
    ✅ Unsubscribe removes the user's key with the last subscription
    ✅ A full queue drops the event instead of blocking the publisher
    ✅ WebSocket rejects missing/invalid tokens with close code 1008
    ✅ WebSocket forwards an INSERT event when a notification is created
    ✅ WebSocket accepts a Bearer Authorization header instead of ?token
    ✅ A failed send ends the feed and releases the subscription
"""

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.routes.notifications import notifications_feed
from app.services.realtime import INSERT, NotificationHub


class TestNotificationHub:

    def test_publish_reaches_every_subscription_of_the_user(self):
        hub = NotificationHub()
        user_id, other_id = uuid.uuid4(), uuid.uuid4()
        first = hub.subscribe(user_id)
        second = hub.subscribe(user_id)
        other = hub.subscribe(other_id)

        delivered = hub.publish(user_id, INSERT, {"id": "n1"})

        assert delivered == 2
        expected = {"event": "INSERT", "table": "notifications", "new": {"id": "n1"}}
        assert first.get_nowait() == expected
        assert second.get_nowait() == expected
        assert other.empty()

    def test_publish_without_subscribers(self):
        assert NotificationHub().publish(uuid.uuid4(), INSERT, {}) == 0

    def test_unsubscribe(self):
        hub = NotificationHub()
        user_id = uuid.uuid4()
        first = hub.subscribe(user_id)
        second = hub.subscribe(user_id)

        hub.unsubscribe(user_id, first)
        assert hub.subscriber_count(user_id) == 1

        hub.unsubscribe(user_id, second)
        hub.unsubscribe(user_id, second)
        assert hub.subscriber_count(user_id) == 0
        assert hub.publish(user_id, INSERT, {}) == 0

    def test_unsubscribe_all(self):
        hub = NotificationHub()
        hub.subscribe(uuid.uuid4())
        hub.subscribe(uuid.uuid4())

        hub.unsubscribe_all()

        assert hub.subscriber_count() == 0

    def test_full_queue_drops_event(self):
        hub = NotificationHub(queue_maxsize=1)
        user_id = uuid.uuid4()
        queue = hub.subscribe(user_id)

        assert hub.publish(user_id, INSERT, {"n": 1}) == 1
        assert hub.publish(user_id, INSERT, {"n": 2}) == 0
        assert queue.qsize() == 1


class FakeWebSocket:
    """Just enough of starlette's WebSocket for the feed handler."""

    def __init__(self, headers=None):
        self.headers = headers or {}
        self.accepted = False
        self.close_code = None
        self.sent = []
        self._client_gone = asyncio.Event()

    async def accept(self):
        self.accepted = True

    async def close(self, code: int = 1000):
        self.close_code = code

    async def send_json(self, data):
        self.sent.append(data)

    async def receive_text(self):
        await self._client_gone.wait()
        raise WebSocketDisconnect(code=1000)

    def disconnect(self):
        self._client_gone.set()


async def wait_for(predicate, attempts: int = 200):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


@pytest.mark.asyncio
async def test_feed_rejects_invalid_token(db_tables):
    ws = FakeWebSocket()
    await notifications_feed(ws, token="not.a.token")

    assert ws.close_code == 1008
    assert ws.accepted is False


def test_websocket_handshake_without_token_is_refused():
    from app.main import app

    client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/api/notifications/ws"):
            pass
    assert exc_info.value.code == 1008


@pytest.mark.asyncio
async def test_feed_forwards_new_notifications(test_client, alice, bob, clean_hub):
    ws = FakeWebSocket()
    task = asyncio.create_task(notifications_feed(ws, token=alice["token"]))
    await wait_for(lambda: clean_hub.subscriber_count(alice["uuid"]) == 1)
    assert ws.accepted is True

    response = await test_client.post(
        "/api/users/follow", json={"user_id": alice["id"]}, headers=bob["headers"]
    )
    assert response.status_code == 200

    await wait_for(lambda: len(ws.sent) == 1)
    message = ws.sent[0]
    assert message["event"] == "INSERT"
    assert message["table"] == "notifications"
    assert message["new"]["type"] == "follow"
    assert message["new"]["user_id"] == alice["id"]
    assert message["new"]["is_read"] is False

    notification_id = message["new"]["id"]
    await test_client.put(f"/api/notifications/{notification_id}", headers=alice["headers"])
    await wait_for(lambda: len(ws.sent) == 2)
    assert ws.sent[1]["event"] == "UPDATE"
    assert ws.sent[1]["new"]["is_read"] is True

    ws.disconnect()
    await asyncio.wait_for(task, timeout=5)
    assert clean_hub.subscriber_count(alice["uuid"]) == 0


@pytest.mark.asyncio
async def test_feed_accepts_bearer_header(alice, clean_hub):
    ws = FakeWebSocket(headers={"authorization": f"Bearer {alice['token']}"})
    task = asyncio.create_task(notifications_feed(ws, token=None))
    await wait_for(lambda: clean_hub.subscriber_count(alice["uuid"]) == 1)
    assert ws.accepted is True

    ws.disconnect()
    await asyncio.wait_for(task, timeout=5)
    assert clean_hub.subscriber_count(alice["uuid"]) == 0


class BrokenSendWebSocket(FakeWebSocket):

    async def send_json(self, data):
        raise RuntimeError("socket already closed")


@pytest.mark.asyncio
async def test_failed_send_ends_feed(alice, clean_hub):
    ws = BrokenSendWebSocket()
    task = asyncio.create_task(notifications_feed(ws, token=alice["token"]))
    await wait_for(lambda: clean_hub.subscriber_count(alice["uuid"]) == 1)

    clean_hub.publish(alice["uuid"], INSERT, {"id": "n1"})

    # The client never disconnects; the handler must return on its own
    await asyncio.wait_for(task, timeout=5)
    assert clean_hub.subscriber_count(alice["uuid"]) == 0
