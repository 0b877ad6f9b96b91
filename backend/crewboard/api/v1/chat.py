# backend/crewboard/api/v1/chat.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from crewboard.db.database import get_db
from crewboard.schemas.chat import RoomCreate, RoomCreated, ChatRoomRead, MessageCreate, MessageRead
from crewboard.services import chat_service
from crewboard.sockets.chat_socket import manager
from crewboard.core.security import get_current_user_id

router = APIRouter()

@router.get("/status", tags=["chat"])
async def get_chat_status():
    """
    Current state of the chat server.
    """
    return {
        "status": "online",
        "active_connections": manager.connection_count()
    }

@router.get("/rooms", response_model=List[ChatRoomRead])
async def get_rooms(current_user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    """My conversations, most recent first"""
    return await chat_service.list_rooms(db, current_user_id)

@router.post("/rooms", response_model=RoomCreated)
async def open_room(
    room_in: RoomCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Returns the room shared with another user, creating it on first contact"""
    room_id = await chat_service.ensure_room(db, current_user_id, room_in.user_id)
    return RoomCreated(room_id=room_id)

@router.get("/rooms/{room_id}/messages", response_model=List[MessageRead])
async def get_messages(
    room_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    await chat_service.get_room_for_participant(db, room_id, current_user_id)
    return await chat_service.list_messages(db, room_id)

@router.post("/rooms/{room_id}/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def post_message(
    room_id: str,
    message_in: MessageCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await chat_service.send_message(db, room_id, current_user_id, message_in.text)
