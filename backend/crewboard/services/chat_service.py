# backend/crewboard/services/chat_service.py
import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import func
from sqlalchemy import select, update, or_
from fastapi import HTTPException

from crewboard.db.models.chat_data import ChatRoom, ChatMessage
from crewboard.db.models.user import User, UserProfile
from crewboard.db.database_redis import RedisManager
from crewboard.core.crew_constants import PLACEHOLDER_NAME
from crewboard.services import user_service

logger = logging.getLogger(__name__)

ROOM_ID_SEPARATOR = "_"

def derive_room_id(user_a: str, user_b: str) -> str:
    """
    Canonical room id for a pair of users: the ids sorted lexicographically
    and joined, so both participants compute the same key.
    """
    if user_a == user_b:
        raise ValueError("A chat room needs two distinct participants")
    first, second = sorted((user_a, user_b))
    return f"{first}{ROOM_ID_SEPARATOR}{second}"

async def _participant_name(db: AsyncSession, user_id: str) -> str:
    """Display name snapshot for a new room. Cosmetic, so lookup failures fall back to a placeholder."""
    try:
        # Savepoint: a failed lookup must not abort the room insert
        async with db.begin_nested():
            user = await db.get(User, user_id)
            profile = await db.get(UserProfile, user_id)
        return user_service.display_name_for(user, profile)
    except SQLAlchemyError as e:
        logger.warning(f"[ChatService] Profile lookup failed for {user_id}, using placeholder: {e}")
        return PLACEHOLDER_NAME

async def _load_room(db: AsyncSession, room_id: str) -> Optional[ChatRoom]:
    result = await db.execute(select(ChatRoom).where(ChatRoom.id == room_id))
    return result.scalar_one_or_none()

async def ensure_room(db: AsyncSession, current_user_id: str, other_user_id: str) -> str:
    """
    Returns the room shared by the two users, creating it on first contact.

    The existence check and the insert run in one transaction. When both users
    open the chat at the same time the losing insert hits the primary key; its
    transaction is rolled back and the re-read finds the winner's room. Any
    other store failure propagates with nothing left behind.
    """
    # Rejected before any store access
    if other_user_id == current_user_id:
        raise HTTPException(status_code=400, detail="Cannot open a chat with yourself")

    room_id = derive_room_id(current_user_id, other_user_id)

    try:
        if await _load_room(db, room_id) is not None:
            await db.commit()
            return room_id

        # Tokens outlive accounts: both sides must still exist
        current = await db.get(User, current_user_id)
        if current is None or not current.is_active:
            await db.rollback()
            raise HTTPException(status_code=401, detail="Account no longer active")

        if await db.get(User, other_user_id) is None:
            await db.rollback()
            raise HTTPException(status_code=404, detail="User not found")

        participants = sorted((current_user_id, other_user_id))
        names = [await _participant_name(db, uid) for uid in participants]

        db.add(ChatRoom(
            id=room_id,
            participant_a=participants[0],
            participant_b=participants[1],
            participant_names=names,
            last_message="",
        ))
        await db.commit()
        logger.info(f"[ChatService] Room {room_id} created by {current_user_id}")
        return room_id
    except IntegrityError as e:
        await db.rollback()
        if await _load_room(db, room_id) is None:
            # Not a lost race: a participant row vanished under the insert
            logger.warning(f"[ChatService] Room {room_id} insert rejected: {e}")
            raise HTTPException(status_code=404, detail="User not found")
        await db.commit()
        logger.info(f"[ChatService] Room {room_id} created concurrently, using the existing one")
        return room_id
    except SQLAlchemyError:
        await db.rollback()
        raise

async def get_room_for_participant(db: AsyncSession, room_id: str, user_id: str) -> ChatRoom:
    room = await _load_room(db, room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Chat room not found")
    if user_id not in room.participants:
        raise HTTPException(status_code=403, detail="Not a participant of this chat")
    return room

async def send_message(db: AsyncSession, room_id: str, sender_id: str, text: str) -> ChatMessage:
    """
    Appends a message and refreshes the room preview.
    1. Empty text check (before any write)
    2. Message insert
    3. Room last-message update (separate write; the preview may briefly lag)
    4. Redis notification for subscribers
    """
    content = (text or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message cannot be empty")

    await get_room_for_participant(db, room_id, sender_id)
    sender, profile = await user_service.get_user_with_profile(db, sender_id)

    new_msg = ChatMessage(
        room_id=room_id,
        sender_id=sender_id,
        sender_name=user_service.display_name_for(sender, profile),
        text=content,
    )
    db.add(new_msg)
    await db.commit()
    await db.refresh(new_msg)

    await db.execute(
        update(ChatRoom)
        .where(ChatRoom.id == room_id)
        .values(last_message=content, last_message_time=func.now())
    )
    await db.commit()

    notification_payload = {
        "type": "CHAT_UPDATE",
        "room_id": room_id,
        "message_id": new_msg.id,
        "sender_id": sender_id,
        "sender_name": new_msg.sender_name,
        "text": content,
    }
    try:
        await RedisManager.publish_chat_update(room_id, notification_payload)
    except Exception as e:
        logger.error(f"[ChatService] Redis publish failed for room {room_id}: {e}")

    return new_msg

def _message_sort_key(message) -> tuple:
    created_at: Optional[datetime] = message.created_at
    # A write still waiting for its server timestamp sorts after everything acknowledged
    if created_at is None:
        return (1, 0.0, message.id or 0)
    return (0, created_at.timestamp(), message.id or 0)

def sort_messages(messages: Iterable) -> list:
    """Full message set ascending by timestamp, whatever order it arrived in."""
    return sorted(messages, key=_message_sort_key)

async def list_messages(db: AsyncSession, room_id: str) -> list[ChatMessage]:
    result = await db.execute(select(ChatMessage).where(ChatMessage.room_id == room_id))
    return sort_messages(result.scalars().all())

async def list_rooms(db: AsyncSession, user_id: str) -> list[dict]:
    """Rooms the user takes part in, most recent activity first."""
    result = await db.execute(
        select(ChatRoom).where(or_(ChatRoom.participant_a == user_id, ChatRoom.participant_b == user_id))
    )

    rooms = []
    for room in result.scalars().all():
        other_id = room.participant_b if room.participant_a == user_id else room.participant_a
        if not other_id or other_id == user_id:
            continue

        other, profile = await user_service.get_user_with_profile(db, other_id)
        rooms.append({
            "id": room.id,
            "participants": room.participants,
            "participant_names": room.participant_names or [],
            "last_message": room.last_message or "",
            "last_message_time": room.last_message_time,
            "other_user": {
                "id": other_id,
                "name": user_service.display_name_for(other, profile),
                "email": other.email if other else "",
                "profile_picture": profile.profile_picture if profile else None,
            },
        })

    rooms.sort(key=lambda r: (r["last_message_time"] is not None, r["last_message_time"].timestamp() if r["last_message_time"] else 0), reverse=True)
    return rooms
