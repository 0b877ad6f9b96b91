# backend/crewboard/sockets/chat_socket.py
import asyncio
import json
import logging
from typing import Dict, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, HTTPException
from fastapi.encoders import jsonable_encoder

from crewboard.db.database import AsyncSessionLocal
from crewboard.db.database_redis import RedisManager, chat_channel
from crewboard.schemas.chat import MessageRead
from crewboard.services import chat_service
from crewboard.core.security import verify_websocket_token

logger = logging.getLogger(__name__)

router = APIRouter()

class ChatManager:
    def __init__(self):
        # Open subscriptions {room_id: {websocket, ...}}
        self.active_connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, room_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.setdefault(room_id, set()).add(websocket)
        logger.info(f"[CHAT] Subscriber joined room {room_id} ({len(self.active_connections[room_id])} open)")

    def disconnect(self, room_id: str, websocket: WebSocket):
        conns = self.active_connections.get(room_id)
        if conns is None:
            return
        conns.discard(websocket)
        if not conns:
            del self.active_connections[room_id]
        logger.info(f"[CHAT] Subscriber left room {room_id}")

    def connection_count(self) -> int:
        return sum(len(conns) for conns in self.active_connections.values())

manager = ChatManager()

async def load_room_snapshot(room_id: str) -> dict:
    """
    Full current message set of a room, sorted by timestamp. Subscribers get the
    whole set on every change instead of incremental inserts.
    """
    async with AsyncSessionLocal() as db:
        messages = await chat_service.list_messages(db, room_id)
    return {
        "type": "MESSAGES",
        "room_id": room_id,
        "messages": jsonable_encoder([MessageRead.model_validate(m) for m in messages]),
    }

async def _authorize(room_id: str, token: Optional[str]) -> Optional[str]:
    user_id = verify_websocket_token(token)
    if not user_id:
        return None
    async with AsyncSessionLocal() as db:
        try:
            await chat_service.get_room_for_participant(db, room_id, user_id)
        except HTTPException:
            return None
    return user_id

async def _forward_updates(websocket: WebSocket, room_id: str):
    redis = RedisManager.get_client()
    async with redis.pubsub() as pubsub:
        await pubsub.subscribe(chat_channel(room_id))
        async for event in pubsub.listen():
            if event.get("type") != "message":
                continue
            await websocket.send_json(await load_room_snapshot(room_id))

async def _drain_client(websocket: WebSocket, user_id: str):
    while True:
        data = await websocket.receive_text()
        try:
            message_json = json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"[CHAT] Ignoring non-JSON frame from {user_id}")
            continue
        # Heartbeat
        if isinstance(message_json, dict) and message_json.get("type") == "PING":
            await websocket.send_json({"type": "PONG"})

@router.websocket("/ws/chat/{room_id}")
async def chat_endpoint(websocket: WebSocket, room_id: str, token: Optional[str] = None):
    user_id = await _authorize(room_id, token)
    if not user_id:
        await websocket.close(code=4003, reason="Not allowed to join this chat")
        return

    await manager.connect(room_id, websocket)
    tasks = []
    try:
        await websocket.send_json(await load_room_snapshot(room_id))

        tasks = [
            asyncio.create_task(_forward_updates(websocket, room_id)),
            asyncio.create_task(_drain_client(websocket, user_id)),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            error = task.exception()
            if error and not isinstance(error, WebSocketDisconnect):
                logger.error(f"[CHAT] Subscription for room {room_id} ended with error: {error}")
    except WebSocketDisconnect:
        pass
    finally:
        for task in tasks:
            task.cancel()
        # Lets the pubsub context unsubscribe before the socket is dropped
        await asyncio.gather(*tasks, return_exceptions=True)
        manager.disconnect(room_id, websocket)
