from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from crewboard.db.database import get_db
from crewboard.schemas.user import AdminUserRead
from crewboard.schemas.post import PostRead
from crewboard.schemas.game import GameRead, GameVerifyRequest, GameModerationResult
from crewboard.services import admin_service, user_service, post_service, game_service
from crewboard.core.security import require_admin

# Every endpoint re-checks the admin role server side
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

@router.get("/users", response_model=List[AdminUserRead])
async def get_users(db: AsyncSession = Depends(get_db)):
    users = await user_service.get_all_users(db)
    return [
        AdminUserRead(
            id=user.id,
            email=user.email,
            is_active=user.is_active,
            is_admin=user.is_admin,
            created_at=user.created_at,
            display_name=user_service.display_name_for(user, profile),
            last_activity=profile.last_activity if profile else None,
        )
        for user, profile in users
    ]

@router.delete("/users/{user_id}")
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db)):
    """Deletes a user with their posts, chats and messages"""
    deleted = await admin_service.delete_user(db, user_id)
    return {"user_id": user_id, "deleted": deleted}

@router.get("/posts", response_model=List[PostRead])
async def get_posts(db: AsyncSession = Depends(get_db)):
    return await post_service.list_all_posts(db)

@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, db: AsyncSession = Depends(get_db)):
    await admin_service.delete_any_post(db, post_id)
    return None

@router.get("/games", response_model=List[GameRead])
async def get_games(db: AsyncSession = Depends(get_db)):
    return await game_service.list_all_games(db)

@router.patch("/games/{game_id}/verify", response_model=GameModerationResult)
async def verify_game(game_id: str, request: GameVerifyRequest, db: AsyncSession = Depends(get_db)):
    """Verifies or unverifies a game; unverifying removes its posts"""
    return await admin_service.set_game_verified(db, game_id, request.verify)

@router.delete("/games/{game_id}", response_model=GameModerationResult)
async def delete_game(game_id: str, db: AsyncSession = Depends(get_db)):
    return await admin_service.delete_game(db, game_id)

@router.post("/maintenance/clear-chats")
async def clear_chats(db: AsyncSession = Depends(get_db)):
    return await admin_service.clear_chats(db)

@router.post("/maintenance/clear-data")
async def clear_all_data(db: AsyncSession = Depends(get_db)):
    return await admin_service.clear_all_data(db)
