from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

class PostCreate(BaseModel):
    game: str = ""
    custom_game: str = ""
    platform: str = ""
    description: str = ""
    tags: List[str] = []
    tags_input: str = "" # raw comma separated text not yet split into tags
    is_active: bool = True

class OfflinePostDraft(BaseModel):
    """A post saved on the client while the service was unreachable."""
    client_id: str = Field(..., min_length=1, max_length=64)
    data: PostCreate
    timestamp: int # client clock, milliseconds since epoch

class OfflineSyncRequest(BaseModel):
    posts: List[OfflinePostDraft]

class OfflineSyncResult(BaseModel):
    synced: int
    skipped: int
    failed: int

class PostRead(BaseModel):
    id: int
    client_id: Optional[str] = None
    game: str
    platform: str
    description: str
    tags: List[str] = []
    is_active: bool
    author_id: str
    author_name: str
    author_email: Optional[str] = None
    responses: int = 0
    quick_post: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
    synced_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BrowsePostRead(PostRead):
    profile_picture: Optional[str] = None
