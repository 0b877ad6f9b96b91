import time
from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from crewboard.db.database import AsyncSessionLocal
from crewboard.db.database_redis import RedisManager, chat_channel
from crewboard.db.models.chat_data import ChatMessage
from crewboard.main import app

PASSWORD = "hunter22"

@pytest.fixture
def live():
    """App with its own startup; HTTP calls, sockets and Redis share the client's event loop."""
    with TestClient(app) as tc:
        yield tc

def sign_up(tc, name):
    email = f"{name.lower()}-{uuid4().hex[:8]}@example.com"
    tc.post("/v1/auth/register", json={"email": email, "name": name, "password": PASSWORD})
    body = tc.post("/v1/auth/login", json={"email": email, "password": PASSWORD}).json()
    return body["user_id"], body["access_token"]

def bearer(token):
    return {"Authorization": f"Bearer {token}"}

def open_room(tc, token, other_id):
    return tc.post("/v1/chat/rooms", json={"user_id": other_id}, headers=bearer(token)).json()["room_id"]

def wait_for_subscriber(tc, room_id):
    channel = chat_channel(room_id)
    redis = RedisManager.get_client()
    for _ in range(200):
        counts = dict(tc.portal.call(redis.pubsub_numsub, channel))
        if counts.get(channel):
            return
        time.sleep(0.01)
    raise AssertionError(f"No subscriber on {channel}")

async def store_out_of_order(room_id, sender_id):
    """Messages written newest first, then a change notification."""
    base = datetime(2024, 5, 1, 20, 0, 0)
    async with AsyncSessionLocal() as db:
        for minutes, text in ((2, "third"), (0, "first"), (1, "second")):
            db.add(ChatMessage(
                room_id=room_id,
                sender_id=sender_id,
                sender_name="Alice",
                text=text,
                created_at=base + timedelta(minutes=minutes),
            ))
        await db.commit()
    await RedisManager.publish_chat_update(room_id, {"type": "CHAT_UPDATE", "room_id": room_id})

def test_socket_refuses_bad_token(live):
    _, alice_token = sign_up(live, "Alice")
    bob_id, _ = sign_up(live, "Bob")
    room_id = open_room(live, alice_token, bob_id)

    with pytest.raises(WebSocketDisconnect) as exc:
        with live.websocket_connect(f"/ws/chat/{room_id}?token=not-a-jwt"):
            pass

    assert exc.value.code == 4003

def test_socket_refuses_outsider(live):
    _, alice_token = sign_up(live, "Alice")
    bob_id, _ = sign_up(live, "Bob")
    _, carol_token = sign_up(live, "Carol")
    room_id = open_room(live, alice_token, bob_id)

    with pytest.raises(WebSocketDisconnect) as exc:
        with live.websocket_connect(f"/ws/chat/{room_id}?token={carol_token}"):
            pass

    assert exc.value.code == 4003

def test_socket_pushes_sorted_snapshot(live):
    alice_id, alice_token = sign_up(live, "Alice")
    bob_id, bob_token = sign_up(live, "Bob")
    room_id = open_room(live, alice_token, bob_id)

    with live.websocket_connect(f"/ws/chat/{room_id}?token={bob_token}") as ws:
        assert ws.receive_json() == {"type": "MESSAGES", "room_id": room_id, "messages": []}

        ws.send_json({"type": "PING"})
        assert ws.receive_json() == {"type": "PONG"}

        wait_for_subscriber(live, room_id)
        live.portal.call(store_out_of_order, room_id, alice_id)
        reordered = ws.receive_json()

        live.post(f"/v1/chat/rooms/{room_id}/messages", json={"text": "gg"}, headers=bearer(alice_token))
        after_send = ws.receive_json()

    assert reordered["type"] == "MESSAGES"
    assert [m["text"] for m in reordered["messages"]] == ["first", "second", "third"]
    assert [m["text"] for m in after_send["messages"]] == ["first", "second", "third", "gg"]
