# backend/crewboard/services/post_service.py
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import select
from fastapi import HTTPException

from crewboard.db.models.post import Post
from crewboard.db.models.user import User, UserProfile, get_utc_now
from crewboard.core.crew_constants import (
    OTHER_GAME, ALL_GAMES, ALL_PLATFORMS, MIN_DESCRIPTION_LENGTH, QUICK_POST_MAX_TAGS, ANONYMOUS_AUTHOR
)
from crewboard.schemas.post import PostCreate, OfflinePostDraft, OfflineSyncResult, BrowsePostRead
from crewboard.services import game_service, user_service

logger = logging.getLogger(__name__)

def validation_error(post_in: PostCreate) -> Optional[str]:
    """Returns the first problem with the form, or None when it is valid."""
    if not post_in.game:
        return "Please select a game"
    if post_in.game == OTHER_GAME and not post_in.custom_game.strip():
        return "Please enter a custom game name"
    if not post_in.platform:
        return "Please select a platform"
    description = post_in.description.strip()
    if not description:
        return "Please provide a description"
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters long"
    return None

def validate_post(post_in: PostCreate) -> None:
    error = validation_error(post_in)
    if error:
        raise HTTPException(status_code=400, detail=error)

def normalize_tags(existing: Iterable[str], raw: str = "") -> list[str]:
    """
    Merges already entered tags with comma separated raw input.
    Blank tags are dropped and duplicates keep their first position.
    """
    candidates = list(existing) + raw.split(",")
    tags = []
    for tag in candidates:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags

def game_title(post_in: PostCreate) -> str:
    return post_in.custom_game.strip() if post_in.game == OTHER_GAME else post_in.game

async def _author_snapshot(db: AsyncSession, author_id: str) -> tuple[str, Optional[str]]:
    user, profile = await user_service.get_user_with_profile(db, author_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user_service.display_name_for(user, profile, fallback=ANONYMOUS_AUTHOR), user.email

def _build_post(post_in: PostCreate, author_id: str, author_name: str, author_email: Optional[str]) -> Post:
    now = get_utc_now()
    return Post(
        game=game_title(post_in),
        platform=post_in.platform,
        description=post_in.description.strip(),
        tags=normalize_tags(post_in.tags, post_in.tags_input),
        is_active=post_in.is_active,
        author_id=author_id,
        author_name=author_name,
        author_email=author_email,
        responses=0,
        created_at=now,
        updated_at=now,
    )

async def create_post(db: AsyncSession, author_id: str, post_in: PostCreate) -> Post:
    """
    Creates a looking-for-group post.
    1. Form validation
    2. Custom game submission for admin review (non-fatal)
    3. Post insert
    4. Author activity update (non-fatal)
    """
    validate_post(post_in)
    author_name, author_email = await _author_snapshot(db, author_id)

    if post_in.game == OTHER_GAME:
        await game_service.submit_custom_game(db, post_in.custom_game, author_id)

    new_post = _build_post(post_in, author_id, author_name, author_email)
    db.add(new_post)
    await db.commit()
    await db.refresh(new_post)
    logger.info(f"[PostService] Post {new_post.id} created by {author_id} for '{new_post.game}'")

    await user_service.touch_activity(db, author_id)
    await db.refresh(new_post)
    return new_post

async def create_quick_post(db: AsyncSession, author_id: str, post_in: PostCreate) -> Post:
    """Reduced post used when the full submission keeps failing: active, at most 3 tags."""
    validate_post(post_in)
    author_name, _ = await _author_snapshot(db, author_id)

    new_post = _build_post(post_in, author_id, author_name, None)
    new_post.tags = new_post.tags[:QUICK_POST_MAX_TAGS]
    new_post.is_active = True
    new_post.quick_post = True
    db.add(new_post)
    await db.commit()
    await db.refresh(new_post)
    return new_post

def _client_time(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).replace(tzinfo=None)

async def sync_offline_posts(db: AsyncSession, author_id: str, drafts: list[OfflinePostDraft]) -> OfflineSyncResult:
    """
    Replays posts queued on the client while offline.

    Replay is idempotent: a draft whose client id is already stored is skipped,
    so a client may resend its whole queue until it sees a success. One bad
    draft does not stop the others.
    """
    author_name, author_email = await _author_snapshot(db, author_id)
    synced = skipped = failed = 0
    seen: set[str] = set()

    for draft in drafts:
        if draft.client_id in seen:
            skipped += 1
            continue
        seen.add(draft.client_id)

        existing = await db.execute(select(Post.id).where(Post.client_id == draft.client_id))
        if existing.scalar_one_or_none() is not None:
            skipped += 1
            continue

        error = validation_error(draft.data)
        if error:
            logger.warning(f"[PostService] Offline post {draft.client_id} rejected: {error}")
            failed += 1
            continue

        try:
            created_at = _client_time(draft.timestamp)
        except (ValueError, OverflowError, OSError) as e:
            logger.warning(f"[PostService] Offline post {draft.client_id} has an unusable timestamp: {e}")
            failed += 1
            continue

        post = _build_post(draft.data, author_id, author_name, author_email)
        post.client_id = draft.client_id
        post.created_at = created_at
        post.synced_at = get_utc_now()
        db.add(post)
        try:
            await db.commit()
            synced += 1
        except IntegrityError:
            # Same draft replayed concurrently by another request
            await db.rollback()
            skipped += 1
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[PostService] Failed to sync offline post {draft.client_id}: {e}")
            failed += 1

    logger.info(f"[PostService] Offline sync for {author_id}: synced={synced} skipped={skipped} failed={failed}")
    return OfflineSyncResult(synced=synced, skipped=skipped, failed=failed)

def filter_posts(posts: Iterable, search: str = "", game: str = ALL_GAMES, platform: str = ALL_PLATFORMS) -> list:
    """
    Browse filters: keyword over game, platform, tags and description
    (case-insensitive), exact game and platform, active posts only.
    """
    filtered = list(posts)

    keyword = (search or "").strip().lower()
    if keyword:
        filtered = [
            p for p in filtered
            if keyword in p.game.lower()
            or keyword in p.platform.lower()
            or any(keyword in tag.lower() for tag in (p.tags or []))
            or keyword in p.description.lower()
        ]

    if game and game != ALL_GAMES:
        filtered = [p for p in filtered if p.game == game]

    if platform and platform != ALL_PLATFORMS:
        filtered = [p for p in filtered if p.platform == platform]

    return [p for p in filtered if p.is_active is not False]

async def browse_posts(db: AsyncSession, search: str = "", game: str = ALL_GAMES, platform: str = ALL_PLATFORMS) -> list[BrowsePostRead]:
    """All posts newest first with the author's current name and picture, then filtered."""
    result = await db.execute(
        select(Post, UserProfile)
        .outerjoin(UserProfile, UserProfile.user_id == Post.author_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    )

    posts = []
    for post, profile in result.all():
        item = BrowsePostRead.model_validate(post)
        if profile is not None:
            item.profile_picture = profile.profile_picture
            if profile.display_name:
                item.author_name = profile.display_name
        posts.append(item)

    return filter_posts(posts, search, game, platform)

async def list_user_posts(db: AsyncSession, author_id: str) -> list[Post]:
    result = await db.execute(
        select(Post).where(Post.author_id == author_id).order_by(Post.created_at.desc(), Post.id.desc())
    )
    return list(result.scalars().all())

async def list_all_posts(db: AsyncSession) -> list[Post]:
    result = await db.execute(select(Post).order_by(Post.created_at.desc(), Post.id.desc()))
    return list(result.scalars().all())

async def _owned_post(db: AsyncSession, post_id: int, author_id: str) -> Post:
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.author_id != author_id:
        raise HTTPException(status_code=403, detail="You can only manage your own posts")
    return post

async def toggle_post_active(db: AsyncSession, post_id: int, author_id: str) -> Post:
    post = await _owned_post(db, post_id, author_id)
    post.is_active = not post.is_active
    post.updated_at = get_utc_now()
    await db.commit()
    await db.refresh(post)
    return post

async def delete_post(db: AsyncSession, post_id: int, author_id: str) -> None:
    post = await _owned_post(db, post_id, author_id)
    await db.delete(post)
    await db.commit()
