# backend/crewboard/services/user_service.py
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, func
from fastapi import HTTPException, status

from crewboard.db.models.user import User, UserProfile, get_utc_now
from crewboard.db.models.post import Post
from crewboard.core.security import get_password_hash, verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from crewboard.core.crew_constants import PLATFORMS, PLACEHOLDER_NAME
from crewboard.schemas.user import ProfileRead, ProfileUpdate
from crewboard.services import admin_service

logger = logging.getLogger(__name__)

def display_name_for(user: Optional[User], profile: Optional[UserProfile] = None, fallback: str = PLACEHOLDER_NAME) -> str:
    """Display name, falling back to the email local part and then a placeholder."""
    if profile is not None and profile.display_name:
        return profile.display_name
    if user is not None and user.email:
        return user.email.split("@")[0]
    return fallback

async def get_user_with_profile(db: AsyncSession, user_id: str) -> tuple[Optional[User], Optional[UserProfile]]:
    user = await db.get(User, user_id)
    if not user:
        return None, None
    profile = await db.get(UserProfile, user_id)
    return user, profile

async def register_user(db: AsyncSession, user_in):
    """
    Registration: duplicate email check, account creation, then the profile.
    A failed profile write does not fail the registration; readers fall back
    to a basic profile built from the account.
    """
    result = await db.execute(select(User).where(User.email == user_in.email))
    if result.scalars().first():
        raise HTTPException(status_code=400, detail="Email is already registered")

    new_user = User(
        email=user_in.email,
        password=get_password_hash(user_in.password)
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    try:
        db.add(UserProfile(user_id=new_user.id, display_name=user_in.name, platforms=[]))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"[UserService] Profile save failed for {new_user.id}, continuing: {e}")

    return {"message": "Registration successful", "user_id": new_user.id}

async def authenticate_user(db: AsyncSession, user_in):
    """
    Login: checks the credentials and issues a token. Returns None on failure.
    """
    result = await db.execute(select(User).where(User.email == user_in.email))
    user = result.scalars().first()

    if not user or not user.is_active or not verify_password(user_in.password, user.password):
        return None

    access_token = create_access_token(
        data={"sub": user.id},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    profile = await db.get(UserProfile, user.id)

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user_id": user.id,
        "email": user.email,
        "name": display_name_for(user, profile),
        "is_admin": user.is_admin,
    }

async def count_user_posts(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(select(func.count(Post.id)).where(Post.author_id == user_id))
    return result.scalar_one()

async def get_profile(db: AsyncSession, user_id: str) -> ProfileRead:
    user, profile = await get_user_with_profile(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    total_posts = await count_user_posts(db, user_id)
    if profile is None:
        # Basic profile from the account; not persisted until the user saves it
        return ProfileRead(
            user_id=user.id,
            email=user.email,
            display_name=display_name_for(user),
            created_at=user.created_at,
            total_posts=total_posts,
            is_saved=False,
        )

    return ProfileRead(
        user_id=user.id,
        email=user.email,
        display_name=display_name_for(user, profile),
        bio=profile.bio,
        profile_picture=profile.profile_picture,
        platforms=profile.platforms or [],
        location=profile.location,
        discord_id=profile.discord_id,
        last_activity=profile.last_activity,
        created_at=profile.created_at,
        total_posts=total_posts,
    )

async def update_profile(db: AsyncSession, user_id: str, changes: ProfileUpdate) -> ProfileRead:
    """Merge-upsert of the profile: only the fields sent are changed."""
    user, profile = await get_user_with_profile(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = changes.model_dump(exclude_unset=True)
    unknown = [p for p in update_data.get("platforms") or [] if p not in PLATFORMS]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown platform(s): {', '.join(unknown)}"
        )

    if profile is None:
        profile = UserProfile(user_id=user_id, display_name=display_name_for(user), platforms=[])
        db.add(profile)

    for key, value in update_data.items():
        setattr(profile, key, value)
    profile.updated_at = get_utc_now()

    await db.commit()
    return await get_profile(db, user_id)

async def touch_activity(db: AsyncSession, user_id: str):
    """Records user activity. Never raises; activity is bookkeeping only."""
    try:
        user, profile = await get_user_with_profile(db, user_id)
        if not user:
            return
        if profile is None:
            profile = UserProfile(user_id=user_id, display_name=display_name_for(user), platforms=[])
            db.add(profile)
        profile.last_activity = get_utc_now()
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"[UserService] Could not update activity for {user_id}: {e}")

async def delete_account(db: AsyncSession, user_id: str) -> dict:
    """Self-service removal; same cascade as the admin delete."""
    counts = await admin_service.delete_user(db, user_id)
    logger.info(f"[UserService] Account {user_id} closed by its owner")
    return counts

async def get_all_users(db: AsyncSession) -> list[tuple[User, Optional[UserProfile]]]:
    result = await db.execute(
        select(User, UserProfile)
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    return [(user, profile) for user, profile in result.all()]
