import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_
from fastapi import HTTPException

from crewboard.db.models.user import User, UserProfile
from crewboard.db.models.post import Post
from crewboard.db.models.game import Game
from crewboard.db.models.chat_data import ChatRoom, ChatMessage

logger = logging.getLogger(__name__)

async def delete_user(db: AsyncSession, user_id: str) -> dict:
    """
    Removes an account with everything that hangs off it: posts, every chat
    room the user is part of together with its messages, and the profile.
    Runs as one transaction.
    """
    exists = await db.execute(select(User.id).where(User.id == user_id))
    if exists.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="User not found")

    room_ids = select(ChatRoom.id).where(
        or_(ChatRoom.participant_a == user_id, ChatRoom.participant_b == user_id)
    )
    messages = await db.execute(
        delete(ChatMessage)
        .where(ChatMessage.room_id.in_(room_ids))
        .execution_options(synchronize_session=False)
    )
    rooms = await db.execute(
        delete(ChatRoom).where(or_(ChatRoom.participant_a == user_id, ChatRoom.participant_b == user_id))
    )
    posts = await db.execute(delete(Post).where(Post.author_id == user_id))
    await db.execute(delete(UserProfile).where(UserProfile.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()

    counts = {"posts": posts.rowcount, "chats": rooms.rowcount, "messages": messages.rowcount}
    logger.info(f"[AdminService] User {user_id} deleted with {counts}")
    return counts

async def _delete_posts_for_game(db: AsyncSession, game_name: str) -> int:
    result = await db.execute(delete(Post).where(Post.game == game_name))
    return result.rowcount

async def set_game_verified(db: AsyncSession, game_id: str, verify: bool) -> dict:
    """Unverifying a game also removes every post that uses it."""
    game = await db.get(Game, game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")

    deleted_posts = 0
    if not verify:
        deleted_posts = await _delete_posts_for_game(db, game.name)

    game.is_verified = verify
    await db.commit()
    logger.info(f"[AdminService] Game {game_id} verified={verify}, {deleted_posts} post(s) removed")
    return {"game_id": game_id, "is_verified": verify, "deleted_posts": deleted_posts}

async def delete_game(db: AsyncSession, game_id: str) -> dict:
    game = await db.get(Game, game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")

    deleted_posts = await _delete_posts_for_game(db, game.name)
    await db.delete(game)
    await db.commit()
    logger.info(f"[AdminService] Game {game_id} deleted along with {deleted_posts} post(s)")
    return {"game_id": game_id, "is_verified": None, "deleted_posts": deleted_posts}

async def delete_any_post(db: AsyncSession, post_id: int) -> None:
    result = await db.execute(delete(Post).where(Post.id == post_id))
    if result.rowcount == 0:
        raise HTTPException(status_code=404, detail="Post not found")
    await db.commit()

async def clear_chats(db: AsyncSession) -> dict:
    """Deletes every message and chat room."""
    messages = await db.execute(delete(ChatMessage))
    rooms = await db.execute(delete(ChatRoom))
    await db.commit()
    counts = {"messages": messages.rowcount, "chats": rooms.rowcount}
    logger.warning(f"[AdminService] All chats cleared: {counts}")
    return counts

async def clear_all_data(db: AsyncSession) -> dict:
    """Deletes all posts, messages and chat rooms. Accounts and games stay."""
    posts = await db.execute(delete(Post))
    messages = await db.execute(delete(ChatMessage))
    rooms = await db.execute(delete(ChatRoom))
    await db.commit()
    counts = {
        "posts": posts.rowcount,
        "messages": messages.rowcount,
        "chats": rooms.rowcount,
    }
    counts["total"] = sum(counts.values())
    logger.warning(f"[AdminService] Database content cleared: {counts}")
    return counts
