from sqlalchemy import Integer, String, ForeignKey, DateTime, Text, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional
from crewboard.db.database import Base
from crewboard.db.models.user import get_utc_now

class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Client-generated id of an offline draft, used to replay it at most once
    client_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)

    game: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Author snapshot at posting time
    author_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    responses: Mapped[int] = mapped_column(Integer, default=0)
    quick_post: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=get_utc_now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=get_utc_now, onupdate=get_utc_now)
    synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
