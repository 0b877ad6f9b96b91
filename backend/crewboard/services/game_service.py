import logging
import re

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select

from crewboard.db.models.game import Game
from crewboard.core.crew_constants import GAMES, OTHER_GAME

logger = logging.getLogger(__name__)

def game_doc_id(name: str) -> str:
    """Slug used as the game's id: lowercase, any char outside [a-z0-9] becomes '_'."""
    return re.sub(r"[^a-z0-9]", "_", name.lower())

async def seed_verified_games(db: AsyncSession) -> int:
    """Inserts the predefined games that are missing, already verified."""
    created = 0
    for name in GAMES:
        if name == OTHER_GAME:
            continue
        game_id = game_doc_id(name)
        if await db.get(Game, game_id):
            continue
        db.add(Game(
            id=game_id,
            name=name,
            is_verified=True,
            submitted_by="system",
            category="Popular Games",
        ))
        created += 1
    await db.commit()
    if created:
        logger.info(f"[GameService] Seeded {created} verified game(s)")
    return created

async def list_verified_games(db: AsyncSession) -> list[Game]:
    result = await db.execute(select(Game).where(Game.is_verified == True).order_by(Game.name))
    return list(result.scalars().all())

async def list_all_games(db: AsyncSession) -> list[Game]:
    result = await db.execute(select(Game).order_by(Game.name))
    return list(result.scalars().all())

async def submit_custom_game(db: AsyncSession, name: str, user_id: str) -> None:
    """
    Stores a user-typed game for admin verification. Errors are logged only:
    a failed submission must not block the post that carries the game.
    """
    name = name.strip()
    if not name:
        return
    try:
        game_id = game_doc_id(name)
        if await db.get(Game, game_id):
            return
        db.add(Game(
            id=game_id,
            name=name,
            is_verified=False,
            submitted_by=user_id,
            category="User Submitted",
        ))
        await db.commit()
        logger.info(f"[GameService] Custom game '{name}' submitted by {user_id} for verification")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[GameService] Saving custom game '{name}' failed: {e}")
