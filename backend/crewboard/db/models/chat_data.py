# backend/crewboard/db/models/chat_data.py
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from crewboard.db.database import Base
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON

class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    # Canonical id: both participant ids sorted and joined
    id = Column(String(140), primary_key=True)
    participant_a = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_b = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_names = Column(JSON, nullable=False, default=list) # same order as participants
    last_message = Column(Text, nullable=False, default="")
    last_message_time = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    messages = relationship("ChatMessage", back_populates="room", cascade="all, delete-orphan")

    @property
    def participants(self) -> list:
        return [self.participant_a, self.participant_b]

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(String(140), ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_name = Column(String(100), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    room = relationship("ChatRoom", back_populates="messages")
