from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional
from crewboard.db.database import Base
from crewboard.db.models.user import get_utc_now

class Game(Base):
    __tablename__ = "games"

    # Slug of the name, so one game name maps to one row
    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    submitted_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True) # user id or "system"
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=get_utc_now)
