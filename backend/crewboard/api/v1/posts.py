from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from crewboard.db.database import get_db
from crewboard.schemas.post import PostCreate, PostRead, BrowsePostRead, OfflineSyncRequest, OfflineSyncResult
from crewboard.services import post_service
from crewboard.core.crew_constants import ALL_GAMES, ALL_PLATFORMS
from crewboard.core.security import get_current_user_id

router = APIRouter(prefix="/posts", tags=["posts"])

@router.get("/", response_model=List[BrowsePostRead])
async def browse_posts(
    search: str = "",
    game: str = ALL_GAMES,
    platform: str = ALL_PLATFORMS,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Active posts, newest first, filtered by keyword, game and platform"""
    return await post_service.browse_posts(db, search, game, platform)

@router.get("/mine", response_model=List[PostRead])
async def my_posts(current_user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    return await post_service.list_user_posts(db, current_user_id)

@router.post("/", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_in: PostCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await post_service.create_post(db, current_user_id, post_in)

@router.post("/quick", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_quick_post(
    post_in: PostCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Reduced post for when the full submission keeps failing"""
    return await post_service.create_quick_post(db, current_user_id, post_in)

@router.post("/sync", response_model=OfflineSyncResult)
async def sync_offline_posts(
    request: OfflineSyncRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Replays posts queued offline; drafts already stored are skipped"""
    return await post_service.sync_offline_posts(db, current_user_id, request.posts)

@router.patch("/{post_id}/toggle", response_model=PostRead)
async def toggle_post(
    post_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await post_service.toggle_post_active(db, post_id, current_user_id)

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    await post_service.delete_post(db, post_id, current_user_id)
    return None
