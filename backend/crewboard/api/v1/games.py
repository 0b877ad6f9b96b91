from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from crewboard.db.database import get_db
from crewboard.schemas.game import GameRead
from crewboard.services import game_service
from crewboard.core.crew_constants import PLATFORMS

router = APIRouter(prefix="/games", tags=["games"])

@router.get("/", response_model=List[GameRead])
async def get_verified_games(db: AsyncSession = Depends(get_db)):
    """Verified games for the post form, sorted by name"""
    return await game_service.list_verified_games(db)

@router.get("/platforms", response_model=List[str])
async def get_platforms():
    return PLATFORMS
