from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

class GameRead(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    is_verified: bool
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class GameVerifyRequest(BaseModel):
    verify: bool

class GameModerationResult(BaseModel):
    game_id: str
    is_verified: Optional[bool] = None
    deleted_posts: int = 0
