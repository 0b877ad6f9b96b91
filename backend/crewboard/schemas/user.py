from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import List, Optional

class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=72)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str
    user_id: str
    email: str
    name: str
    is_admin: bool = False

class UserRead(BaseModel):
    id: str
    email: str
    is_active: bool
    is_admin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    platforms: Optional[List[str]] = None
    location: Optional[str] = Field(None, max_length=100)
    discord_id: Optional[str] = Field(None, max_length=100)

class ProfileRead(BaseModel):
    user_id: str
    email: str
    display_name: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    platforms: List[str] = []
    location: Optional[str] = None
    discord_id: Optional[str] = None
    last_activity: Optional[datetime] = None
    created_at: Optional[datetime] = None
    total_posts: int = 0
    is_saved: bool = True # False for a basic profile built from the account only

class AdminUserRead(UserRead):
    display_name: str
    last_activity: Optional[datetime] = None
