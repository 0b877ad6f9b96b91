from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from crewboard.core.crew_constants import MAX_MESSAGE_LENGTH

class RoomCreate(BaseModel):
    user_id: str # the other participant

class RoomCreated(BaseModel):
    room_id: str

class ChatUser(BaseModel):
    id: str
    name: str
    email: str = ""
    profile_picture: Optional[str] = None

class ChatRoomRead(BaseModel):
    id: str
    participants: List[str]
    participant_names: List[str] = []
    last_message: str = ""
    last_message_time: Optional[datetime] = None
    other_user: ChatUser

class MessageCreate(BaseModel):
    text: str = Field(..., max_length=MAX_MESSAGE_LENGTH)

class MessageRead(BaseModel):
    id: int
    room_id: str
    text: str
    sender_id: str
    sender_name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
