from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crewboard.db.database import get_db
from crewboard.schemas.user import ProfileRead, ProfileUpdate
from crewboard.services import user_service
from crewboard.core.security import get_current_user_id

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me/profile", response_model=ProfileRead)
async def get_my_profile(current_user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    """My profile with a live post count"""
    return await user_service.get_profile(db, current_user_id)

@router.put("/me/profile", response_model=ProfileRead)
async def update_my_profile(
    changes: ProfileUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Creates or merges into my profile"""
    return await user_service.update_profile(db, current_user_id, changes)

@router.get("/{user_id}/profile", response_model=ProfileRead)
async def get_user_profile(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await user_service.get_profile(db, user_id)

@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_account(current_user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    """Deletes my account together with my posts and chats"""
    await user_service.delete_account(db, current_user_id)
    return None
